"""Account domain exceptions."""

from app.core.exceptions import ConflictError, NotFoundError


class AccountNotFoundError(NotFoundError):
    """Raised when an account cannot be found."""

    error_type = "user_not_found"

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class DocumentNotFoundError(NotFoundError):
    """Raised when a document id does not belong to the account."""

    error_type = "document_not_found"

    def __init__(self, message: str = "Document not found"):
        super().__init__(message)


class ProfileImageNotFoundError(NotFoundError):
    """Raised when removing a profile image that was never attached."""

    error_type = "profile_image_not_found"

    def __init__(self, message: str = "No profile image found"):
        super().__init__(message)


class EmailExistsError(ConflictError):
    """Raised when attempting to register with an existing email."""

    error_type = "email_exists"

    def __init__(self, message: str = "User with this email already exists"):
        super().__init__(message)
