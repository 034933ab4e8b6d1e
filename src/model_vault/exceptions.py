"""
Model Vault Exception Hierarchy

Every error raised by the framework carries the HTTP status code the API layer
reports for it, so the request adapter can map failures without knowing each
type individually.
"""


class ModelVaultError(Exception):
    """Base exception for all Model Vault errors."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


# =============================================================================
# Input validation (400) - raised before any file-system access
# =============================================================================


class InvalidFileName(ModelVaultError):
    """400 - File name contains directory components or disallowed characters."""

    status_code = 400


class InvalidTransformParameter(ModelVaultError):
    """400 - A scale/translate parameter could not be used."""

    status_code = 400

    def __init__(self, message: str, parameter: str | None = None):
        super().__init__(message)
        self.parameter = parameter


class InvalidVectorShape(InvalidTransformParameter):
    """400 - Parameter is not a sequence of exactly three elements."""

    pass


class InvalidVectorElement(InvalidTransformParameter):
    """400 - Parameter element is not a finite number."""

    pass


# =============================================================================
# File store
# =============================================================================


class FileNotFound(ModelVaultError):
    """404 - Sanitized name does not resolve to a stored file."""

    status_code = 404


class FileAlreadyExists(ModelVaultError):
    """409 - Rename target is already taken."""

    status_code = 409


class UploadTooLarge(ModelVaultError):
    """413 - Upload exceeded the configured size limit."""

    status_code = 413


# =============================================================================
# Streaming
# =============================================================================


class MalformedRecord(ModelVaultError):
    """422 - Coordinate record with non-numeric fields (strict mode only)."""

    status_code = 422

    def __init__(self, message: str, line_number: int | None = None):
        super().__init__(message)
        self.line_number = line_number


class SourceReadError(ModelVaultError):
    """500 - The source file became unreadable after it was opened."""

    status_code = 500


class LineTooLong(SourceReadError):
    """500 - A single line exceeded the reader's buffer limit."""

    pass


class SinkWriteError(ModelVaultError):
    """Output sink rejected a write (client disconnect, broken pipe).

    Never reported to a caller: the caller is already gone.
    """

    status_code = 499
