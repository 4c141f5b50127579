from .manager import available_backends, ensure_materialized, get_adapter, get_proxy

__all__ = ["available_backends", "ensure_materialized", "get_adapter", "get_proxy"]

"""
Backends are imported lazily: python-igraph and NetworkX are only loaded when
a view of that kind is first requested.
"""
