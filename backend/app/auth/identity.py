"""Caller identity and admin authorization dependencies."""
import secrets
from dataclasses import dataclass
from typing import Optional

from fastapi import Header

from app.config import settings
from app.constants import ADMIN_KEY_HEADER, USER_EMAIL_HEADER
from app.utils.exceptions import authentication_error, forbidden_error


@dataclass(frozen=True)
class UserIdentity:
    """Authenticated caller; projects and credits are keyed by email."""
    email: str


def get_current_user(
    user_email: Optional[str] = Header(None, alias=USER_EMAIL_HEADER, description="Authenticated user email"),
) -> UserIdentity:
    """
    Resolve the caller from the identity header set by the auth gateway.

    Raises HTTPException if the header is missing or blank.
    """
    email = (user_email or "").strip().lower()
    if not email:
        raise authentication_error("User identity required")
    return UserIdentity(email=email)


def require_admin(
    admin_key: Optional[str] = Header(None, alias=ADMIN_KEY_HEADER),
) -> None:
    """Allow the request only when it carries the configured admin key."""
    if not settings.admin_api_key or not admin_key:
        raise forbidden_error("Admin key required")
    if not secrets.compare_digest(admin_key, settings.admin_api_key):
        raise forbidden_error("Invalid admin key")
