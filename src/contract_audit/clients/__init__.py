"""External service clients."""

from .explorer import ExplorerRequest, ExplorerResult, fetch_explorer

__all__ = ["ExplorerRequest", "ExplorerResult", "fetch_explorer"]
