from typing import Any


class ServiceError(Exception):
    """Base class for failures that are reported to the client."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None) -> None:
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)


class ValidationError(ServiceError):
    status_code = 400
    message = "Invalid request"


class Unauthenticated(ServiceError):
    status_code = 401
    message = "Unauthorized"


class InvalidCredentials(ServiceError):
    status_code = 401
    message = "Invalid email or password"


class PasswordRequired(ServiceError):
    status_code = 401
    message = "Password required"


class InvalidPassword(ServiceError):
    status_code = 401
    message = "Invalid password"


class Forbidden(ServiceError):
    status_code = 403
    message = "You don't have permission to access this file"


class AccountBlocked(ServiceError):
    status_code = 403
    message = "Your account has been blocked. Please contact an administrator."


class NotFound(ServiceError):
    status_code = 404
    message = "File not found"


class ParentNotFound(NotFound):
    message = "Parent folder not found"


class NotFoundOnDisk(NotFound):
    message = "File not found on server"


class Conflict(ServiceError):
    status_code = 400
    message = "Conflict"


class DuplicateName(Conflict):
    message = "A folder with this name already exists"


class EmailTaken(Conflict):
    message = "Email already in use"


class QuotaExceeded(ServiceError):
    status_code = 400
    message = "Not enough storage space"


class NotAFolder(ServiceError):
    status_code = 400
    message = "Parent must be a folder"


class IsAFolder(ServiceError):
    status_code = 400
    message = "Cannot download a folder"


class InternalError(ServiceError):
    pass
