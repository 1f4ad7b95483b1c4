"""
Exceptions shared by the loader, cache and request layers.

Load-time errors (TranslationLoadError, BundleParseError) stay inside the
per-version load loop. Request-time errors (NotFoundError, InvalidInputError,
PackagingError) are turned into HTTP responses by the bible blueprint.
"""


class BibleError(Exception):
    """Base exception for all Bible service errors."""
    pass


class ConfigurationError(BibleError):
    """Raised when startup configuration is missing or inconsistent."""
    pass


class SourceRootNotFoundError(BibleError):
    """Raised when the configured assets directory does not exist."""

    def __init__(self, root):
        super().__init__(f"Bible assets directory not found: {root}")
        self.root = root


class BundleParseError(BibleError):
    """Raised when a bundle (directory or archive) cannot be parsed."""
    pass


class TranslationLoadError(BibleError):
    """Raised when a single version fails to load from its source."""

    def __init__(self, identifier: str, reason: str = ""):
        message = f"Failed to load version {identifier}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.identifier = identifier
        self.reason = reason


class NotFoundError(BibleError):
    """Raised when a version, book or chapter does not exist."""
    pass


class InvalidInputError(BibleError):
    """Raised when request input is rejected before any lookup."""
    pass


class PackagingError(BibleError):
    """Raised when a version cannot be packed into an export archive."""
    pass
