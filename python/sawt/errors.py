"""Error taxonomy for Sawt."""
from typing import Optional


class SawtError(Exception):
    """Base class for pipeline errors carrying an HTTP-equivalent status."""

    status = 500

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class InputError(SawtError, ValueError):
    """Malformed or missing input data. Fixable by the caller."""

    status = 400


class PayloadTooLargeError(SawtError, ValueError):
    """Artifact exceeds the configured maximum size."""

    status = 413


class UpstreamError(SawtError):
    """An external classifier failed.

    Raised inside the aggregator and always recovered into a neutral
    signal there.
    """

    status = 502

    def __init__(self, source: str, message: str, detail: Optional[str] = None):
        super().__init__(message, detail)
        self.source = source


class InternalError(SawtError):
    """Unexpected fault. Callers only ever see a generic message."""

    status = 500

    def __init__(self, detail: Optional[str] = None):
        super().__init__("internal error", detail)


class ConfigError(SawtError, ValueError):
    """Invalid startup configuration."""
