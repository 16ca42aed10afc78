"""Upload domain exceptions."""

from app.core.exceptions import BadRequestError, InternalError


class UploadError(BadRequestError):
    """Base class for rejected uploads."""

    error_type = "upload_error"

    def __init__(self, message: str = "Upload error"):
        super().__init__(message)


class UnexpectedFieldError(UploadError):
    """Raised for a file under a field name the route does not accept."""

    error_type = "unexpected_field"

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Unexpected field: {field_name}")


class TooManyFilesError(UploadError):
    """Raised when a field carries more files than it allows."""

    error_type = "too_many_files"

    def __init__(self, field_name: str | None = None):
        self.field_name = field_name
        message = "Unexpected file or too many files"
        super().__init__(f"{message}: {field_name}" if field_name else message)


class FileSizeExceededError(UploadError):
    """Raised when a file is larger than its size limit."""

    error_type = "file_size_exceeded"

    def __init__(self, message: str = "File size exceeded the limit"):
        super().__init__(message)


class UnsupportedFileTypeError(UploadError):
    """Raised when a file's extension or mimetype is not allowed."""

    error_type = "unsupported_file_type"

    def __init__(self, field_name: str, reason: str):
        self.field_name = field_name
        super().__init__(f"{field_name}: {reason}")


class UploadConfigurationError(InternalError):
    """Raised when a field is declared with a file type that has no policy."""

    error_type = "upload_configuration_error"

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Invalid file type configuration for field: {field_name}")
