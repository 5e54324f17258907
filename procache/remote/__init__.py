"""Remote system of record integration."""

__all__ = ["ProShopClient", "RemoteRecordSource"]


def __getattr__(name: str):
    """Lazy import so the refresh engine can use the interface without httpx."""
    if name == "ProShopClient":
        from procache.remote.proshop import ProShopClient
        return ProShopClient
    if name == "RemoteRecordSource":
        from procache.remote.base import RemoteRecordSource
        return RemoteRecordSource
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
