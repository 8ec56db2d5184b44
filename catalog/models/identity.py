from pydantic import BaseModel


class AuthIdentity(BaseModel):
    """Opaque result of a successful login or registration."""

    uid: str
    email: str
    display_name: str = ""
