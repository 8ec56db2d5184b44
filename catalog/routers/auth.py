from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from catalog.core.exceptions import AuthFailedError
from catalog.core.logging import get_logger
from catalog.core.security import SESSION_MAX_AGE, create_session_cookie, secrets_match
from catalog.deps import SESSION_COOKIE_NAME, get_current_user, get_store
from catalog.models.user import Role, User
from catalog.services.store import Store

router = APIRouter()
log = get_logger(__name__)

# Sessions live in the signed cookie; the provider's process-wide current
# identity is left untouched by request handlers.


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=80)
    email: str
    password: str = Field(..., min_length=6)
    role: Role = Role.VIEWER


class LoginRequest(BaseModel):
    email: str
    password: str


class AdminLoginRequest(BaseModel):
    password: str = ""


def user_out(user: User) -> dict:
    return user.model_dump(mode="json", exclude={"password"})


def _start_session(response: Response, user: User) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=create_session_cookie({"user_id": user.id}),
        max_age=SESSION_MAX_AGE,
        httponly=True,
        secure=False,  # set True in prod with HTTPS
        samesite="lax",
        path="/",
    )


@router.post("/register")
async def auth_register(body: RegisterRequest, response: Response, store: Store = Depends(get_store)):
    """Create a viewer or creator account and start a session."""
    user = await store.register(body.name, body.email, body.password, body.role, activate=False)
    _start_session(response, user)
    return {"user": user_out(user)}


@router.post("/login")
async def auth_login(body: LoginRequest, response: Response, store: Store = Depends(get_store)):
    user = await store.login(body.email, body.password, activate=False)
    _start_session(response, user)
    return {"user": user_out(user)}


@router.post("/admin")
async def auth_admin(
    response: Response,
    body: AdminLoginRequest | None = None,
    store: Store = Depends(get_store),
):
    """Sign in as the reserved admin account, provisioning it on first use.

    The caller must present the admin portal password.
    """
    password = body.password if body else ""
    if not secrets_match(password, store.settings.admin_password):
        log.warning("admin_portal_rejected")
        raise AuthFailedError("Invalid admin password")
    user = await store.login_as_admin(activate=False)
    _start_session(response, user)
    return {"user": user_out(user)}


@router.post("/logout")
async def auth_logout(response: Response):
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return {"status": "ok"}


@router.get("/me")
async def auth_me(user: User = Depends(get_current_user)):
    """Return current user. Requires session cookie."""
    return user_out(user)
