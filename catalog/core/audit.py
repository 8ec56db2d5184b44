"""Audit log for critical actions."""

from typing import Any

from catalog.models.audit_log import AuditLog
from catalog.storage.base import BackendAdapter


async def log_event(
    adapter: BackendAdapter,
    user_id: str | None,
    event_type: str,
    entity_type: str,
    entity_id: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> None:
    """Append to the audit_logs collection."""
    entry = AuditLog(
        user_id=user_id,
        event_type=event_type,
        entity_type=entity_type,
        entity_id=entity_id,
        metadata=metadata or {},
    )
    await adapter.put(AuditLog.collection, entry.id, entry.to_document())
