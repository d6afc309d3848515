"""HTTP infrastructure."""

from memopad.infrastructure.http.server import HttpServer

__all__ = ["HttpServer"]
