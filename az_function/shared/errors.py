from typing import Any, Dict, Optional


class ProxyError(Exception):
    """Base error for the artists proxy; carries the HTTP status to report."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code

    def payload(self) -> Dict[str, Any]:
        return {"error": str(self)}


class ConfigurationError(ProxyError):
    """Required server configuration (the GitHub credential) is absent or unusable."""

    def __init__(self, message: str, status_code: int = 500, which: Optional[str] = None):
        super().__init__(message, status_code)
        self.which = which

    def payload(self) -> Dict[str, Any]:
        body = super().payload()
        if self.which:
            body["which"] = self.which
        return body


class ValidationError(ProxyError):
    status_code = 400


class StoreError(ProxyError):
    """Non-success response from the GitHub contents API."""

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class StoreReadError(StoreError):
    pass


class StoreWriteError(StoreError):
    pass


class StoreConflictError(StoreWriteError):
    """The sha supplied on write is stale; another writer committed first."""


class StoreContentError(StoreError):
    """Stored file content is not a JSON array of strings."""
