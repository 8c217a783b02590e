"""
Custom Exceptions for the Hostel Management backend
===================================================

Every error a handler or service raises on purpose derives from HostelError.
The API layer maps each family to one HTTP status code and the uniform
response envelope ({success: false, message, error?}).

Usage:
    from app.core.exceptions import RegistrationNotFoundError

    if not temp_registration:
        raise RegistrationNotFoundError(email)
"""

from typing import Optional, Any, Dict


class HostelError(Exception):
    """Base exception for all hostel backend errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Validation & Duplicate Errors (400-type)
# ============================================

class ValidationError(HostelError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class DuplicateError(HostelError):
    """Entity with the same unique key already exists"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="DUPLICATE", details=details)


class DuplicatePendingError(DuplicateError):
    """A live temporary registration already exists for this email"""

    def __init__(self, email: str):
        super().__init__(
            "Registration with this email already exists. "
            "Please complete payment or use a different email.",
            field="email"
        )
        self.code = "DUPLICATE_PENDING"
        self.details["email"] = email


class AlreadyRegisteredError(DuplicateError):
    """Email already belongs to a promoted (paid) account"""

    def __init__(self, email: str):
        super().__init__(
            "User with this email is already registered and completed payment",
            field="email"
        )
        self.code = "ALREADY_REGISTERED"
        self.details["email"] = email


# ============================================
# Authentication Errors (401-type)
# ============================================

class AuthenticationError(HostelError):
    """Caller identity could not be established"""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="AUTH_FAILED")


class InvalidCredentialsError(AuthenticationError):
    """Login failed. One message for unknown email, inactive and wrong password."""

    def __init__(self):
        super().__init__("Invalid credentials")
        self.code = "INVALID_CREDENTIALS"


class RoleMismatchError(AuthenticationError):
    """Login role hint does not match the resolved account"""

    def __init__(self, message: str = "Invalid role for this account"):
        super().__init__(message)
        self.code = "ROLE_MISMATCH"


class InvalidSessionError(AuthenticationError):
    """Session claims do not resolve to a live, active account"""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)
        self.code = "INVALID_SESSION"


class TokenExpiredError(InvalidSessionError):
    """JWT token has expired"""

    def __init__(self):
        super().__init__("Token expired")
        self.code = "TOKEN_EXPIRED"


# ============================================
# Authorization Errors (403-type)
# ============================================

class AuthorizationError(HostelError):
    """Authenticated, but not allowed to perform this action"""

    status_code = 403

    def __init__(self, message: str = "Access denied. Insufficient permissions."):
        super().__init__(message, code="FORBIDDEN")


# ============================================
# Resource Errors (404-type)
# ============================================

class NotFoundError(HostelError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str, message: Optional[str] = None):
        super().__init__(
            message or f"{resource_type} '{resource_id}' not found",
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class RegistrationNotFoundError(NotFoundError):
    """No live temporary registration (unknown or expired)"""

    def __init__(self, identifier: str):
        super().__init__(
            "Registration", identifier,
            message="Temporary registration not found or has expired"
        )


class AccountNotFoundError(NotFoundError):
    """Account not found"""

    def __init__(self, account_id: str):
        super().__init__("User", account_id, message="User not found")


class HostelNotFoundError(NotFoundError):
    """Hostel not found"""

    def __init__(self, hostel_id: str):
        super().__init__("Hostel", hostel_id, message="Hostel not found.")


class InvoiceNotFoundError(NotFoundError):
    """Invoice record or its rendered document not found"""

    def __init__(self, invoice_id: str, message: str = "Invoice not found"):
        super().__init__("Invoice", invoice_id, message=message)


# ============================================
# Integration / Internal Errors
# ============================================

class IntegrationFailure(HostelError):
    """A secondary step failed (e.g. invoice generation during promotion).

    Logged by the caller and never turned into an HTTP error on its own.
    """

    def __init__(self, message: str, step: Optional[str] = None):
        super().__init__(message, code="INTEGRATION_FAILURE")
        if step:
            self.details["step"] = step


class InternalError(HostelError):
    """Unexpected failure. Detail hidden from clients in production."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message, code="INTERNAL_ERROR")


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: HostelError, include_detail: bool = False) -> Dict[str, Any]:
    """Convert exception to the uniform error envelope"""
    body: Dict[str, Any] = {
        "success": False,
        "message": error.message,
    }
    if include_detail:
        body["error"] = error.code
    return body


def success_response(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    """Build the uniform success envelope"""
    body: Dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body
