import uuid
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel

E = TypeVar("E", bound="Entity")


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class Entity(BaseModel):
    """A document stored in one named collection, keyed by ``id``."""

    collection: ClassVar[str]

    id: str

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_document(cls: type[E], doc: dict[str, Any]) -> E:
        return cls.model_validate(doc)
