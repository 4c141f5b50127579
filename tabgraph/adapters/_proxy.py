class BackendProxy:
    def __init__(self, graph, backend_name):
        from .manager import ensure_materialized

        self._backend = ensure_materialized(backend_name, graph)

    @property
    def backend(self):
        """The cached backend graph object itself."""
        return self._backend["graph"]

    def __getattr__(self, name):
        # Try backend-level function (e.g., networkx.degree_centrality)
        fn = getattr(self._backend["module"], name, None)
        if callable(fn):

            def wrapped(*args, **kwargs):
                return fn(self._backend["graph"], *args, **kwargs)

            return wrapped

        # Otherwise forward attribute to the backend graph itself (e.g., igraph.Graph.degree)
        return getattr(self._backend["graph"], name)
