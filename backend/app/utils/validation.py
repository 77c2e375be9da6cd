"""
Validation utilities for input validation and error handling.
"""
import re
from datetime import datetime, timezone
from typing import Any, Callable

from ..models.candidate import CANDIDATE_STATUSES
from .error_handlers import ValidationError

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


def validate_email(email: str) -> str:
    """Validate email format."""
    if not email or not isinstance(email, str):
        raise ValidationError("Email is required")

    email = email.strip().lower()
    if len(email) > 255:
        raise ValidationError("Email too long (max 255 characters)")

    if not re.match(EMAIL_PATTERN, email):
        raise ValidationError("Invalid email format")

    return email


def validate_password(password: str) -> None:
    """Validate password strength."""
    if not password or not isinstance(password, str):
        raise ValidationError("Password is required")

    if len(password) < 6:
        raise ValidationError("Password must be at least 6 characters")

    if len(password) > 128:
        raise ValidationError("Password too long (max 128 characters)")


def validate_string_field(
    value: Any,
    field_name: str,
    min_length: int = 1,
    max_length: int = 1000,
    required: bool = True,
    pattern: str | None = None,
) -> str | None:
    """Validate a string field with common rules."""
    if value is None:
        if required:
            raise ValidationError(f"{field_name} is required")
        return None

    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")

    value = value.strip()

    if required and not value:
        raise ValidationError(f"{field_name} cannot be empty")

    if len(value) < min_length:
        raise ValidationError(f"{field_name} must be at least {min_length} characters")

    if len(value) > max_length:
        raise ValidationError(f"{field_name} must not exceed {max_length} characters")

    if pattern and not re.match(pattern, value):
        raise ValidationError(f"{field_name} format is invalid")

    return value


def validate_integer_field(
    value: Any,
    field_name: str,
    min_value: int | None = None,
    max_value: int | None = None,
    required: bool = True,
) -> int | None:
    """Validate an integer field."""
    if value is None or value == "":
        if required:
            raise ValidationError(f"{field_name} is required")
        return None

    # bool is an int subclass; "true" is never a count.
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a valid integer")

    if not isinstance(value, int):
        try:
            value = int(str(value).strip())
        except (ValueError, TypeError):
            raise ValidationError(f"{field_name} must be a valid integer")

    if min_value is not None and value < min_value:
        raise ValidationError(f"{field_name} must be at least {min_value}")

    if max_value is not None and value > max_value:
        raise ValidationError(f"{field_name} must not exceed {max_value}")

    return value


def to_utc_naive(value: datetime) -> datetime:
    """Convert to a naive UTC datetime; naive input is already taken as UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def validate_datetime_field(value: Any, field_name: str, required: bool = False) -> datetime | None:
    """
    Accept a datetime or an ISO 8601 string (trailing Z allowed).

    The result is naive UTC, which is how timestamps are stored.
    """
    if value is None or value == "":
        if required:
            raise ValidationError(f"{field_name} is required")
        return None

    if isinstance(value, datetime):
        return to_utc_naive(value)

    try:
        parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        raise ValidationError(f"Invalid {field_name} format. Use ISO 8601 format.")
    return to_utc_naive(parsed)


def validate_role(role: str) -> str:
    """Validate user role."""
    if not role or not isinstance(role, str):
        raise ValidationError("Role is required")

    role = role.strip().lower()
    valid_roles = {"admin", "recruiter"}

    if role not in valid_roles:
        raise ValidationError(f"Invalid role. Must be one of: {', '.join(sorted(valid_roles))}")

    return role


def validate_candidate_status(status: Any) -> str:
    """Validate a candidate status against the fixed enumeration."""
    if not isinstance(status, str) or status not in CANDIDATE_STATUSES:
        raise ValidationError(
            f"Invalid status: {status}. Valid statuses are: {', '.join(CANDIDATE_STATUSES)}",
            details={"valid_statuses": list(CANDIDATE_STATUSES)},
            code="invalid_status",
        )
    return status


def collect_field_errors(checks: dict[str, Callable[[], Any]]) -> dict[str, Any]:
    """
    Run one validator per field and report every failure at once.

    Returns the cleaned values keyed by field name; raises a single
    ValidationError whose details list each violated field.
    """
    cleaned: dict[str, Any] = {}
    errors: dict[str, str] = {}
    for field, check in checks.items():
        try:
            cleaned[field] = check()
        except ValidationError as e:
            errors[field] = e.message

    if errors:
        summary = "; ".join(f"{field}: {message}" for field, message in errors.items())
        raise ValidationError(f"Validation failed - {summary}", details={"fields": errors})

    return cleaned


def sanitize_filename(filename: str) -> str:
    """Sanitize filename to prevent directory traversal and other attacks."""
    if not filename:
        raise ValidationError("Filename is required")

    # Remove any path separators
    filename = filename.replace("/", "_").replace("\\", "_")

    # Remove any null bytes
    filename = filename.replace("\x00", "")

    # Remove directory traversal sequences
    filename = filename.replace("..", "_")

    # Remove leading dots to prevent hidden files
    filename = filename.lstrip(".")

    # Ensure it's not too long
    if len(filename) > 255:
        raise ValidationError("Filename too long")

    # Ensure it has some content
    if not filename or filename == "_":
        raise ValidationError("Invalid filename")

    return filename
