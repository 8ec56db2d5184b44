"""Shared FastAPI dependencies."""

from fastapi import Request

from catalog.core.exceptions import ForbiddenError, UnauthorizedError
from catalog.core.logging import bind_user_id
from catalog.core.security import load_session_cookie
from catalog.models.user import User
from catalog.services.store import Store

SESSION_COOKIE_NAME = "catalog_session"


def get_store(request: Request) -> Store:
    return request.app.state.store


async def get_current_user(request: Request) -> User:
    """Dependency: load session from cookie and return User."""
    cookie = request.cookies.get(SESSION_COOKIE_NAME)
    if not cookie:
        raise UnauthorizedError("Not authenticated")
    payload = load_session_cookie(cookie)
    if not payload:
        raise UnauthorizedError("Invalid or expired session")
    user_id = payload.get("user_id")
    if not user_id:
        raise UnauthorizedError("Invalid session")
    user = await get_store(request).get_user(user_id)
    if not user:
        raise UnauthorizedError("User not found")
    bind_user_id(user.id)
    return user


async def get_optional_user(request: Request) -> User | None:
    if not request.cookies.get(SESSION_COOKIE_NAME):
        return None
    try:
        return await get_current_user(request)
    except UnauthorizedError:
        return None


async def require_creator(request: Request) -> User:
    """Dependency: require role creator (admins pass too)."""
    user = await get_current_user(request)
    if not (user.is_creator or user.is_admin):
        raise ForbiddenError("Creators only")
    return user


async def require_admin(request: Request) -> User:
    """Dependency: require current user to have role admin."""
    user = await get_current_user(request)
    if not user.is_admin:
        raise ForbiddenError("Admin only")
    return user
