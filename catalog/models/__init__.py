from catalog.models.app_settings import AppSettings
from catalog.models.audit_log import AuditLog
from catalog.models.category import Category
from catalog.models.identity import AuthIdentity
from catalog.models.moderation_request import ModerationRequest, RequestAction
from catalog.models.movie import Movie, MovieChanges, MovieDraft
from catalog.models.status import ReviewStatus
from catalog.models.user import Role, User

__all__ = [
    "AppSettings",
    "AuditLog",
    "AuthIdentity",
    "Category",
    "ModerationRequest",
    "Movie",
    "MovieChanges",
    "MovieDraft",
    "RequestAction",
    "ReviewStatus",
    "Role",
    "User",
]
