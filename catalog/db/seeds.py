"""Default datasets written by the local store on first access to a collection."""

from catalog.core.config import Settings
from catalog.models.app_settings import AppSettings
from catalog.models.category import DEFAULT_CATEGORIES
from catalog.storage.base import Document


def default_app_settings(settings: Settings) -> AppSettings:
    return AppSettings(earn_link=settings.default_earn_link)


def default_seeds(settings: Settings) -> dict[str, list[Document]]:
    return {
        "categories": [c.to_document() for c in DEFAULT_CATEGORIES],
        "settings": [default_app_settings(settings).to_document()],
        "movies": [],
        "users": [],
        "requests": [],
    }
