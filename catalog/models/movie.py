from datetime import datetime
from typing import ClassVar

from pydantic import BaseModel, Field

from catalog.models.base import Entity
from catalog.models.status import ReviewStatus


class Movie(Entity):
    collection: ClassVar[str] = "movies"

    creator_id: str  # lookup key only
    creator_name: str = ""
    title: str
    description: str = ""
    release_year: int
    watch_link: str = ""
    category_id: str = ""
    cover_image: str = ""  # vertical poster
    backdrop_image: str = ""  # horizontal backdrop
    status: ReviewStatus = ReviewStatus.PENDING
    views: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class MovieDraft(BaseModel):
    """Creator-supplied fields for an upload."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    release_year: int = Field(default_factory=lambda: datetime.utcnow().year)
    watch_link: str = ""
    category_id: str = ""
    cover_image: str = ""
    backdrop_image: str = ""


class MovieChanges(BaseModel):
    """Editable movie fields; status and counters are not editable here."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    release_year: int | None = None
    watch_link: str | None = None
    category_id: str | None = None
    cover_image: str | None = None
    backdrop_image: str | None = None
