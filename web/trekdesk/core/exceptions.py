from typing import Any, Optional, Dict


class BaseError(Exception):
    """Base exception class for the application.

    Every subclass carries the HTTP status it maps to, so routers never
    translate errors by hand; the registered handler renders
    ``{"error": message, "details": details}``.
    """

    def __init__(
        self,
        message: str = "An error occurred",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(BaseError):
    """Raised when a trek, batch, booking or user does not exist"""

    def __init__(self, entity: str, id: Any):
        super().__init__(
            message=f"{entity} with id {id} not found",
            status_code=404,
            details={"entity": entity, "id": id}
        )


class ValidationError(BaseError):
    """Raised for malformed input (slot counts, phone, email, age ...)"""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            status_code=400,
            details=details
        )


class AuthenticationError(BaseError):
    """Raised when credentials are missing or invalid"""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message=message, status_code=401)


class AuthorizationError(BaseError):
    """Raised when the caller's role is not allowed"""

    def __init__(self, message: str = "Access denied"):
        super().__init__(message=message, status_code=403)


class ConflictError(BaseError):
    """Raised when the request conflicts with stored state"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, status_code=409, details=details)


class CapacityExceededError(ConflictError):
    """Raised when a batch cannot take the requested number of participants"""

    def __init__(self, batch_id: Any, requested: int, available: int):
        super().__init__(
            message=f"Batch {batch_id} has {available} slots available, {requested} requested",
            details={"batch_id": batch_id, "requested": requested, "available": available}
        )


class BusinessLogicError(BaseError):
    """Raised for business rule violations"""

    def __init__(self, message: str, rule: Optional[str] = None):
        details = {"rule": rule} if rule else {}
        super().__init__(
            message=message,
            status_code=422,
            details=details
        )
