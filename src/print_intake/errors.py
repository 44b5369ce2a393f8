"""Error types for the intake pipeline."""


class PrintIntakeError(Exception):
    """Base error for recoverable intake failures."""


class ValidationError(PrintIntakeError):
    """Raised when customer input is incomplete or malformed."""


class DeviceUnavailable(PrintIntakeError):
    """Raised when no camera could be opened."""


class NoActiveStream(PrintIntakeError):
    """Raised when a frame is requested from a released stream."""


class EncodingError(PrintIntakeError):
    """Raised when a frame cannot be compressed into an image."""


class UploadError(PrintIntakeError):
    """Raised when a submission upload does not succeed."""


class StoreError(PrintIntakeError):
    """Raised when the backing object store rejects an operation."""


class RecordNotFound(StoreError):
    """Raised when a record id does not exist in the store."""


class DraftGenerationError(PrintIntakeError):
    """Raised when the text-generation service fails to produce a draft."""


class UploadTooLarge(ValidationError):
    """Raised when an uploaded file exceeds the size limit."""


class AuthenticationRequired(PrintIntakeError):
    """Raised when a dashboard operation runs without an authenticated session."""
