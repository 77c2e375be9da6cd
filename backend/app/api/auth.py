from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from ..config import ALLOW_ADMIN_SIGNUP, PRIVILEGED_ROLE
from ..database import get_db
from ..models.user import User
from ..utils.jwt import create_access_token
from ..utils.security import hash_password, verify_password
from ..utils.validation import validate_email, validate_password, validate_role
from ..utils.error_handlers import (
    ForbiddenError,
    UnauthorizedError,
    ValidationError,
    get_error_message,
    handle_database_error,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


class SignupRequest(BaseModel):
    email: str
    password: str
    role: str = "recruiter"  # admin / recruiter
    name: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str


def _token_response(user: User) -> dict:
    token = create_access_token({"sub": str(user.id), "role": user.role})
    return {
        "access_token": token,
        "token_type": "bearer",
        "user": {"id": user.id, "name": user.name, "email": user.email, "role": user.role},
    }


@router.post("/signup")
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    email = validate_email(payload.email)
    validate_password(payload.password)
    role = validate_role(payload.role)

    if role == PRIVILEGED_ROLE and not ALLOW_ADMIN_SIGNUP:
        raise ForbiddenError("Admin accounts cannot be created through public signup")

    if db.query(User).filter(User.email == email).first():
        raise ValidationError(get_error_message("email_exists"), code="email_exists")

    try:
        hashed = hash_password(payload.password)
    except ValueError as e:
        raise ValidationError(str(e))

    user = User(
        name=(payload.name or "").strip() or None,
        email=email,
        password=hashed,
        role=role,
    )
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(
            e, "creating user", duplicate_key="email_exists", duplicate_code="email_exists"
        )

    logger.info("User %s signed up with role %s", user.id, user.role)
    return {"message": "User created successfully", **_token_response(user)}


@router.post("/login")
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    email = validate_email(payload.email)
    if not payload.password:
        raise ValidationError("Password is required")

    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(payload.password, user.password):
        raise UnauthorizedError(get_error_message("invalid_credentials"))

    return _token_response(user)
