from datetime import datetime
from typing import Any, ClassVar

from pydantic import Field

from catalog.models.base import Entity, new_id


class AuditLog(Entity):
    collection: ClassVar[str] = "audit_logs"

    id: str = Field(default_factory=lambda: new_id("aud"))
    user_id: str | None = None  # optional for system events
    event_type: str
    entity_type: str
    entity_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=datetime.utcnow)
