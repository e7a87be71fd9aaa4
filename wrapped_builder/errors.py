"""Exception types shared across the pipeline."""


class WrappedError(Exception):
    """Base class for all Wrapped Builder errors."""


class ConfigurationError(WrappedError):
    """Raised when a required setting (e.g. the API credential) is missing."""

    def __init__(self, message: str, details: str = "") -> None:
        super().__init__(message)
        self.details = details


class GenerationError(WrappedError):
    """Raised when the generation service call fails."""

    def __init__(self, message: str, details: str = "") -> None:
        super().__init__(message)
        self.details = details


class IngestionError(WrappedError):
    """Raised for uploads whose file type cannot be ingested at all."""
