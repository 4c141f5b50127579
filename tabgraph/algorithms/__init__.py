from .similarity import SimilarityMatrix, get_jaccard_similarity

__all__ = ["SimilarityMatrix", "get_jaccard_similarity"]
