from datetime import datetime
from enum import Enum
from typing import ClassVar

from pydantic import Field

from catalog.models.base import Entity


class Role(str, Enum):
    VIEWER = "viewer"
    CREATOR = "creator"
    ADMIN = "admin"


class User(Entity):
    collection: ClassVar[str] = "users"

    name: str = ""
    email: str = ""
    role: Role = Role.VIEWER
    credits: int = Field(default=0, ge=0)  # only meaningful for creators
    avatar_url: str | None = None
    password: str | None = None  # accepted on input, never persisted
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_creator(self) -> bool:
        return self.role == Role.CREATOR
