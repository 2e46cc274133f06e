"""Core exceptions for remotesync.

All service-level exceptions inherit from RemoteSyncException.
"""


class RemoteSyncException(Exception):
    """Base exception for remotesync."""

    pass


class ProviderNotFoundException(RemoteSyncException):
    """Raised when no destination adapter is registered for a provider."""

    def __init__(self, provider: str):
        """Initialize provider not found exception.

        Args:
            provider: The provider selector that could not be resolved
        """
        self.provider = provider
        super().__init__(f"No destination registered for provider '{provider}'")


class MultipartBoundaryError(RemoteSyncException, ValueError):
    """Raised when a multipart boundary occurs inside one of the body parts."""

    pass
