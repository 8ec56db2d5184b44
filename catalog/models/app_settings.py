from typing import ClassVar

from catalog.models.base import Entity

SETTINGS_ID = "global"


class AppSettings(Entity):
    """Singleton; always stored under ``SETTINGS_ID`` and replaced wholesale."""

    collection: ClassVar[str] = "settings"

    id: str = SETTINGS_ID
    earn_link: str
