from datetime import datetime
from enum import Enum
from typing import ClassVar

from pydantic import Field

from catalog.models.base import Entity
from catalog.models.status import ReviewStatus


class RequestAction(str, Enum):
    UPLOAD = "upload"
    EDIT = "edit"
    DELETE = "delete"
    PROMOTE = "promote"


class ModerationRequest(Entity):
    collection: ClassVar[str] = "requests"

    creator_id: str
    creator_name: str = ""  # denormalized for display
    movie_id: str
    movie_title: str = ""  # denormalized; goes stale once the movie is gone
    action: RequestAction = RequestAction.UPLOAD
    status: ReviewStatus = ReviewStatus.PENDING
    timestamp: datetime = Field(default_factory=datetime.utcnow)
