"""
Audit Service - records create/update/delete/status events per entity.
"""
import logging
from dataclasses import dataclass, asdict, field
from datetime import datetime
from typing import Any, Optional
import uuid

from .store import JsonStore, Page

logger = logging.getLogger(__name__)

ENTITIES = ('client', 'material', 'ink', 'service_order')
ACTIONS = ('create', 'update', 'delete', 'status')


@dataclass
class AuditLog:
    """A single audit entry with before/after snapshots of the record."""
    entity: str
    entity_id: str
    action: str
    user_id: str
    before: Optional[Any] = None
    after: Optional[Any] = None
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


class AuditService:
    """Writes audit entries to the store; a failed write never breaks the caller."""

    def __init__(self, store: JsonStore, user_id: str = "u1"):
        self.store = store
        self.user_id = user_id

    def record(self, entity: str, entity_id: str, action: str, before=None, after=None) -> Optional[AuditLog]:
        if entity not in ENTITIES or action not in ACTIONS:
            logger.error("Refusing audit entry %s/%s", entity, action)
            return None
        entry = AuditLog(
            entity=entity,
            entity_id=entity_id,
            action=action,
            user_id=self.user_id,
            before=before,
            after=after,
        )
        try:
            self.store.add('audit_logs', asdict(entry))
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error writing audit log for %s %s: %s", entity, entity_id, e)
            return None
        return entry

    def list_logs(self, page: int = 1, limit: int = 10) -> Page:
        return self.store.paginate('audit_logs', page=page, limit=limit)
