"""
Error taxonomy for QuiC.

Every business-rule failure raised by a repository or a route is a QuicError
subclass carrying the HTTP status it maps to. Anything else (sqlite3.Error,
unexpected exceptions) is treated as an infrastructure failure and answered
with a 500.
"""


class QuicError(Exception):
    """Base class for expected, user-facing failures."""
    status_code = 500
    default_message = "An internal server error occurred"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(QuicError):
    """Raised when request input is missing or malformed."""
    status_code = 400
    default_message = "Missing required fields"


class AuthenticationError(QuicError):
    status_code = 401
    default_message = "Authentication required"


class UnknownUsernameError(AuthenticationError):
    default_message = "Username does not exist or incorrect, please either register or try again."


class IncorrectPasswordError(AuthenticationError):
    default_message = "Incorrect password, please try again."


class NotFoundError(QuicError):
    status_code = 404
    default_message = "Not found"


class UserNotFoundError(NotFoundError):
    """Raised when a user id no longer resolves to a user row."""
    default_message = "User not found"


class FolderNotFoundError(NotFoundError):
    default_message = "Folder not found"


class ConflictError(QuicError):
    status_code = 409
    default_message = "Already exists"


class UserAlreadyExistsError(ConflictError):
    """Raised when attempting to create a user that already exists."""
    default_message = "Username already exists"


class FolderAlreadyExistsError(ConflictError):
    default_message = "Folder already exists for this user"


class SetAlreadyExistsError(ConflictError):
    default_message = "Set already exists in this folder"
