"""skillpack: API-wrapper skills behind one request/response envelope."""

__version__ = "1.0.0"
