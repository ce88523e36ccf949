"""Exception types for the photo facets core.

Invalid user input (unknown filter values, malformed URLs, corrupt persisted
JSON) is normalized away and never raised. These exceptions cover the
failures that callers must handle: unavailable services and storage.
"""

from typing import Optional

from config.config_loader import ConfigurationError


class FacetsError(Exception):
    """Base class for photo facets errors."""

    pass


class CatalogUnavailableError(FacetsError):
    """Raised when the catalog query service cannot answer a request."""

    def __init__(self, message: str, retryable: bool = True):
        super().__init__(message)
        self.retryable = retryable


class DistributionUnavailableError(FacetsError):
    """Raised when per-value counts cannot be computed for a dimension."""

    def __init__(self, message: str, dimension: Optional[str] = None):
        super().__init__(message)
        self.dimension = dimension


class StorageError(FacetsError):
    """Raised by key/value stores when persisted state cannot be read or written."""

    pass


__all__ = [
    "FacetsError",
    "CatalogUnavailableError",
    "DistributionUnavailableError",
    "StorageError",
    "ConfigurationError",
]
