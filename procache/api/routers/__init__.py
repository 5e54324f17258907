"""Router module exports."""
from procache.api.routers import cache, refresh

__all__ = ["cache", "refresh"]
