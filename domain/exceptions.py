"""Domain Exceptions"""
from typing import Optional

from domain.enums import AuthErrorCode


class NotFoundError(LookupError):
    """Raised when a room or reservation id does not resolve"""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class BackendError(RuntimeError):
    """A document store, object store or identity backend call failed"""

    def __init__(self, operation: str, cause: Optional[Exception] = None):
        self.operation = operation
        self.cause = cause
        message = f"Backend operation failed: {operation}"
        if cause is not None:
            message = f"{message} ({cause})"
        super().__init__(message)


AUTH_ERROR_MESSAGES = {
    AuthErrorCode.INVALID_CREDENTIAL: "Invalid email or password",
    AuthErrorCode.USER_NOT_FOUND: "No account found with this email",
    AuthErrorCode.WRONG_PASSWORD: "Incorrect password",
    AuthErrorCode.TOO_MANY_REQUESTS: "Too many failed attempts. Please try again later",
}


class AuthError(Exception):
    """Sign-in failure carrying the identity provider's error code"""

    def __init__(self, code: AuthErrorCode):
        self.code = code
        self.message = AUTH_ERROR_MESSAGES.get(code, "Login failed. Please try again")
        super().__init__(self.message)
