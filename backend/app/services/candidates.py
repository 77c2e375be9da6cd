"""
Candidate record operations.

Every function takes a SQLAlchemy session and returns ORM rows or plain
dicts; HTTP concerns stay in ``api/candidate.py``. Field validation runs
before any write and reports all violated fields together.

Concurrent writers are not coordinated: the last committed update wins.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ..models.candidate import DEFAULT_STATUS, Candidate
from ..models.resume import ResumeFile
from ..models.user import User
from ..utils.error_handlers import (
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
    get_error_message,
    handle_database_error,
)
from ..utils.roles import is_privileged
from ..utils.validation import (
    collect_field_errors,
    validate_candidate_status,
    validate_datetime_field,
    validate_email,
    validate_integer_field,
    validate_string_field,
)
from .pagination import build_pagination, page_window, parse_page_params
from .query_filters import PUBLIC_FIELDS, ListQuery, apply_filters, apply_sort
from .upload_gate import AcceptedResume

logger = logging.getLogger(__name__)

RESUME_PLACEHOLDER = "Binary data not shown"

UPDATABLE_FIELDS = ("full_name", "email", "status", "position", "experience", "notes", "interview_date")
IMMUTABLE_FIELDS = ("id", "created_by", "created_at", "resume_file", "resume_filename")


def _isoformat_utc(value: datetime | None) -> str | None:
    # Stored timestamps are naive UTC.
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def candidate_to_public(candidate: Candidate, fields: Iterable[str] | None = None) -> dict:
    """Serialize a candidate; resume bytes are never included."""
    creator = candidate.creator
    data = {
        "id": candidate.id,
        "full_name": candidate.full_name,
        "email": candidate.email,
        "status": candidate.status,
        "position": candidate.position,
        "experience": candidate.experience,
        "resume_file": RESUME_PLACEHOLDER if candidate.resume_file_id is not None else None,
        "resume_filename": candidate.resume_filename,
        "notes": candidate.notes,
        "interview_date": _isoformat_utc(candidate.interview_date),
        "created_at": _isoformat_utc(candidate.created_at),
        "created_by": (
            {"id": creator.id, "name": creator.name, "email": creator.email}
            if creator is not None
            else {"id": candidate.created_by}
        ),
    }
    if fields is None:
        return data
    return {key: data[key] for key in PUBLIC_FIELDS if key in fields}


def _base_query(db: Session) -> Query:
    # Creator identity is always joined into returned records.
    return db.query(Candidate).options(joinedload(Candidate.creator))


def _parse_id(candidate_id: Any) -> int | None:
    try:
        value = int(str(candidate_id))
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def _not_found(candidate_id: Any) -> NotFoundError:
    return NotFoundError(f"Candidate not found with id of {candidate_id}")


def _ensure_email_available(db: Session, email: str, *, exclude_id: int | None = None) -> None:
    q = db.query(Candidate.id).filter(Candidate.email == email)
    if exclude_id is not None:
        q = q.filter(Candidate.id != exclude_id)
    if q.first() is not None:
        message = get_error_message("candidate_email_exists")
        raise ValidationError(message, details={"fields": {"email": message}}, code="duplicate_email")


def _commit(db: Session, operation: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, operation)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def list_candidates(db: Session, list_query: ListQuery) -> dict:
    """Filtered, sorted, paginated listing: ``{count, total, pagination, data}``."""
    page, limit = parse_page_params(list_query.page, list_query.limit)
    start_index, _ = page_window(page, limit)

    filtered = apply_filters(db.query(Candidate), list_query.clauses)
    total = filtered.count()

    q = apply_filters(_base_query(db), list_query.clauses)
    rows = apply_sort(q, list_query.sort).offset(start_index).limit(limit).all()

    return {
        "count": len(rows),
        "total": total,
        "pagination": build_pagination(page, limit, total),
        "data": [candidate_to_public(c, list_query.select) for c in rows],
    }


def list_candidates_by_status(db: Session, status: str) -> list[Candidate]:
    status = validate_candidate_status(status)
    return (
        _base_query(db)
        .filter(Candidate.status == status)
        .order_by(Candidate.created_at.desc(), Candidate.id.desc())
        .all()
    )


def list_candidates_by_position(db: Session, position: str) -> list[Candidate]:
    """Case-insensitive literal substring match on ``position``."""
    term = (position or "").strip().lower()
    if not term:
        raise ValidationError("Position search term cannot be empty")
    return (
        _base_query(db)
        .filter(Candidate.position.icontains(term, autoescape=True))
        .order_by(Candidate.created_at.desc(), Candidate.id.desc())
        .all()
    )


def get_candidate(db: Session, candidate_id: Any) -> Candidate:
    parsed = _parse_id(candidate_id)
    candidate = _base_query(db).filter(Candidate.id == parsed).first() if parsed else None
    if candidate is None:
        raise _not_found(candidate_id)
    return candidate


def get_candidate_resume(db: Session, candidate_id: Any) -> tuple[Candidate, ResumeFile]:
    candidate = get_candidate(db, candidate_id)
    if candidate.resume is None:
        raise NotFoundError(get_error_message("no_resume"))
    return candidate, candidate.resume


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def _validate_new_candidate(data: dict) -> dict:
    return collect_field_errors({
        "full_name": lambda: validate_string_field(data.get("full_name"), "Full name", max_length=255),
        "email": lambda: validate_email(data.get("email")),
        "status": lambda: validate_candidate_status(data.get("status") or DEFAULT_STATUS),
        "position": lambda: validate_string_field(data.get("position"), "Position", max_length=255),
        "experience": lambda: validate_integer_field(
            data.get("experience"), "Experience", min_value=0, required=False
        ) or 0,
        "notes": lambda: validate_string_field(
            data.get("notes"), "Notes", min_length=0, max_length=5000, required=False
        ),
        "interview_date": lambda: validate_datetime_field(data.get("interview_date"), "interview_date"),
    })


def create_candidate(
    db: Session,
    data: dict,
    *,
    user: dict,
    resume: AcceptedResume | None = None,
) -> Candidate:
    """Insert a candidate owned by ``user``; an accepted resume is stored alongside."""
    creator = db.query(User).filter(User.id == _parse_id(user.get("sub"))).first()
    if creator is None:
        raise UnauthorizedError("Invalid user")

    cleaned = _validate_new_candidate(data)
    _ensure_email_available(db, cleaned["email"])

    candidate = Candidate(**cleaned, created_by=creator.id)
    if resume is not None:
        candidate.resume = ResumeFile(
            content=resume.content,
            content_type=resume.content_type,
            size_bytes=resume.size_bytes,
        )
        candidate.resume_filename = resume.filename

    db.add(candidate)
    _commit(db, "creating candidate")
    logger.info("Candidate %s created by user %s", candidate.id, user.get("sub"))
    return get_candidate(db, candidate.id)


def _validate_changes(changes: dict) -> dict:
    validators = {
        "full_name": lambda v: validate_string_field(v, "Full name", max_length=255),
        "email": lambda v: validate_email(v),
        "status": lambda v: validate_candidate_status(v),
        "position": lambda v: validate_string_field(v, "Position", max_length=255),
        "experience": lambda v: validate_integer_field(v, "Experience", min_value=0),
        "notes": lambda v: validate_string_field(v, "Notes", min_length=0, max_length=5000, required=False),
        "interview_date": lambda v: validate_datetime_field(v, "interview_date"),
    }
    return collect_field_errors({
        name: (lambda name=name: validators[name](changes[name])) for name in changes
    })


def update_candidate(db: Session, candidate_id: Any, changes: dict, *, user: dict | None) -> Candidate:
    """
    Apply a partial update.

    A ``status`` key requires the privileged role; other fields are open to
    any caller that reaches this operation.
    """
    candidate = get_candidate(db, candidate_id)

    immutable = [name for name in changes if name in IMMUTABLE_FIELDS]
    unknown = [name for name in changes if name not in UPDATABLE_FIELDS and name not in IMMUTABLE_FIELDS]
    if immutable or unknown:
        errors = {name: "Field cannot be changed" for name in immutable}
        errors.update({name: "Unknown field" for name in unknown})
        raise ValidationError(
            f"Cannot update field(s): {', '.join(errors)}",
            details={"fields": errors},
        )

    if "status" in changes and not is_privileged(user):
        raise ForbiddenError(get_error_message("status_admin_only"))

    cleaned = _validate_changes(changes)
    if "email" in cleaned:
        _ensure_email_available(db, cleaned["email"], exclude_id=candidate.id)

    for name, value in cleaned.items():
        setattr(candidate, name, value)

    _commit(db, "updating candidate")
    db.refresh(candidate)
    return candidate


def update_candidate_status(db: Session, candidate_id: Any, status: Any) -> Candidate:
    """Write only the status field. Caller must already be privileged."""
    status = validate_candidate_status(status)
    candidate = get_candidate(db, candidate_id)
    candidate.status = status
    _commit(db, "updating candidate status")
    db.refresh(candidate)
    logger.info("Candidate %s moved to status %s", candidate.id, status)
    return candidate


def delete_candidate(db: Session, candidate_id: Any) -> None:
    candidate = get_candidate(db, candidate_id)
    db.delete(candidate)
    _commit(db, "deleting candidate")
