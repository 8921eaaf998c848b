"""Request-scoped dependencies.

Authentication happens upstream; the gateway forwards the verified caller as
``X-User-Id`` and their role as ``X-User-Role``.
"""

from fastapi import Depends, Header

from cellar.errors import ForbiddenError, UnauthorizedError


def current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    if not x_user_id:
        raise UnauthorizedError("Not authorized, no token")
    return x_user_id


def optional_user_id(x_user_id: str | None = Header(default=None)) -> str | None:
    return x_user_id or None


def is_admin(x_user_role: str | None = Header(default=None)) -> bool:
    return (x_user_role or "").lower() == "admin"


def admin_user_id(user_id: str = Depends(current_user_id), admin: bool = Depends(is_admin)) -> str:
    if not admin:
        raise ForbiddenError("Not authorized as an admin")
    return user_id
