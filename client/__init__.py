"""REST client for the STAR backend (requests)."""

from client.api import ApiError, RemoteCollection, StarApi

__all__ = ["ApiError", "RemoteCollection", "StarApi"]
