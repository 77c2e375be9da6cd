"""
Centralized error handling and user-friendly error messages.
"""
import logging

from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error."""
    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: dict | None = None,
        code: str | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.code = code
        super().__init__(self.message)


class ValidationError(AppError):
    """Validation error."""
    def __init__(self, message: str, details: dict | None = None, code: str = "validation_error"):
        super().__init__(message, status_code=400, details=details, code=code)


class NotFoundError(AppError):
    """Resource not found error."""
    def __init__(self, message: str = "Resource not found", details: dict | None = None):
        super().__init__(message, status_code=404, details=details, code="not_found")


class UnauthorizedError(AppError):
    """Unauthorized access error."""
    def __init__(self, message: str = "Unauthorized access", details: dict | None = None):
        super().__init__(message, status_code=401, details=details, code="unauthorized")


class ForbiddenError(AppError):
    """Forbidden access error."""
    def __init__(self, message: str = "Access forbidden", details: dict | None = None):
        super().__init__(message, status_code=403, details=details, code="forbidden")


class FileUploadError(AppError):
    """File upload error."""
    def __init__(self, message: str, code: str, details: dict | None = None):
        super().__init__(message, status_code=400, details=details, code=code)


class DatabaseError(AppError):
    """Database error."""
    def __init__(self, message: str = "Database operation failed", details: dict | None = None):
        super().__init__(message, status_code=500, details=details, code="database_error")


# User-friendly error messages
ERROR_MESSAGES = {
    # Authentication
    "invalid_credentials": "Invalid email or password. Please try again.",
    "email_exists": "An account with this email already exists. Please login instead.",
    "weak_password": "Password must be at least 6 characters long.",
    "session_expired": "Your session has expired. Please login again.",

    # File uploads
    "file_too_large": "File size is too large. Maximum size is 5MB",
    "invalid_file_type": "Resume must be a PDF, DOC, or DOCX file",

    # Candidates
    "candidate_email_exists": "A candidate with this email already exists.",
    "status_admin_only": "Only admins can change candidate status",
    "no_resume": "This candidate has no resume attached.",

    # General
    "unauthorized": "Please login to access this feature.",
    "forbidden": "You don't have permission to access this resource.",
    "not_found": "The requested resource was not found.",
    "server_error": "Something went wrong on our end. Please try again later.",
    "database_error": "Database connection issue. Please try again later.",
    "validation_error": "Please check your input and try again.",
}


def get_error_message(error_key: str, default: str | None = None) -> str:
    """Get a user-friendly error message."""
    return ERROR_MESSAGES.get(error_key, default or ERROR_MESSAGES["server_error"])


def handle_database_error(
    error: Exception,
    operation: str = "",
    *,
    duplicate_key: str = "candidate_email_exists",
    duplicate_code: str = "duplicate_email",
) -> AppError:
    """
    Map a storage failure to an AppError the central handler can render.

    Unique violations are reported with ``duplicate_key``/``duplicate_code``;
    callers writing other tables pass their own.
    """
    logger.error(f"Database error during {operation}: {error}")

    error_str = str(error).lower()

    if "duplicate" in error_str or "unique" in error_str:
        message = get_error_message(duplicate_key)
        return ValidationError(message, details={"fields": {"email": message}}, code=duplicate_code)

    if "foreign key" in error_str:
        return ValidationError(
            "Invalid reference. The related record may have been deleted.",
            code="invalid_reference",
        )

    if "connection" in error_str or "operational" in error_str:
        return AppError(get_error_message("database_error"), status_code=503, code="database_unavailable")

    return DatabaseError(get_error_message("server_error"))


def create_error_response(
    status_code: int,
    message: str,
    details: dict | None = None,
    code: str | None = None,
) -> JSONResponse:
    """Create a standardized error response."""
    content = {
        "success": False,
        "error": message,
    }

    if code:
        content["code"] = code

    if details:
        content["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content
    )
