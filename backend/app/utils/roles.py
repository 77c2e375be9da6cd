from fastapi import Depends

from ..config import PRIVILEGED_ROLE
from .dependencies import get_current_user
from .error_handlers import ForbiddenError


def is_privileged(user: dict | None) -> bool:
    return bool(user) and (user.get("role") or "").lower() == PRIVILEGED_ROLE


def _role_required(required_role: str, message: str | None = None):
    def check_role(user=Depends(get_current_user)):
        if (user.get("role") or "").lower() != required_role:
            raise ForbiddenError(message or f"{required_role.capitalize()} access only")
        return user
    return check_role


admin_only = _role_required(PRIVILEGED_ROLE, "Only admins can update candidate status")
