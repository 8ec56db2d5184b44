from enum import Enum


class ReviewStatus(str, Enum):
    """Shared by movies and moderation requests; a movie mirrors its upload request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not ReviewStatus.PENDING
