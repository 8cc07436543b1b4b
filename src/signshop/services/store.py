"""
JSON Store - local file persistence for the back office collections.

One JSON array per collection under the data directory. This is the
local-storage style fallback; anything with the same methods can stand in
for it.
"""
import json
import logging
import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)

COLLECTIONS = ('clients', 'materials', 'inks', 'service_orders', 'audit_logs')
BACKUP_REQUIRED_KEYS = ('meta', 'clients', 'materials', 'inks', 'service_orders')
SEARCH_FIELDS = ('name', 'email', 'document', 'supplier')


@dataclass
class Page:
    """One page of a collection listing."""
    data: list[dict] = field(default_factory=list)
    count: int = 0
    total_pages: int = 0


class JsonStore:
    """Collection store backed by JSON files."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.json"

    def all(self, collection: str) -> list[dict]:
        """Read every row of a collection. Unreadable files read as empty."""
        path = self._path(collection)
        if not path.exists():
            return []
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Error reading %s: %s", collection, e)
            return []
        return data if isinstance(data, list) else []

    def replace(self, collection: str, rows: list[dict]):
        """Overwrite a collection."""
        with open(self._path(collection), 'w', encoding='utf-8') as f:
            json.dump(rows, f, indent=2, ensure_ascii=False, default=str)

    def add(self, collection: str, row: dict) -> dict:
        rows = self.all(collection)
        new_row = {**row, 'id': row.get('id') or str(uuid.uuid4())}
        rows.append(new_row)
        self.replace(collection, rows)
        return new_row

    def update(self, collection: str, row_id: str, changes: dict) -> dict:
        rows = self.all(collection)
        for i, row in enumerate(rows):
            if row.get('id') == row_id:
                rows[i] = {**row, **changes, 'id': row_id}
                self.replace(collection, rows)
                return rows[i]
        raise ValueError(f"Item '{row_id}' not found in {collection}")

    def remove(self, collection: str, row_id: str) -> bool:
        rows = self.all(collection)
        remaining = [r for r in rows if r.get('id') != row_id]
        if len(remaining) == len(rows):
            return False
        self.replace(collection, remaining)
        return True

    def count(self, collection: str) -> int:
        return len(self.all(collection))

    def find(self, collection: str, predicate: Callable[[dict], bool]) -> list[dict]:
        return [r for r in self.all(collection) if predicate(r)]

    def find_by_id(self, collection: str, row_id: str) -> Optional[dict]:
        for row in self.all(collection):
            if row.get('id') == row_id:
                return row
        return None

    def paginate(
        self,
        collection: str,
        page: int = 1,
        limit: int = 10,
        search: str = "",
        order_by: str = "created_at",
        filters: Optional[dict] = None,
    ) -> Page:
        """
        Search, filter, sort (newest first) and slice a collection.

        Search is a case-insensitive substring match over name, email,
        document and supplier. Filters with falsy values are ignored.
        """
        rows = self.all(collection)

        if search:
            needle = search.lower()
            rows = [
                r for r in rows
                if any(needle in str(r.get(f) or '').lower() for f in SEARCH_FIELDS)
            ]

        for key, value in (filters or {}).items():
            if value:
                rows = [r for r in rows if r.get(key) == value]

        rows.sort(key=lambda r: str(r.get(order_by) or r.get('created_at') or ''), reverse=True)

        limit = max(int(limit), 1)
        page = max(int(page), 1)
        count = len(rows)
        offset = (page - 1) * limit
        return Page(
            data=rows[offset:offset + limit],
            count=count,
            total_pages=math.ceil(count / limit),
        )

    def meta(self) -> dict:
        path = self._path('meta')
        if not path.exists():
            return {}
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f) or {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Error reading meta: %s", e)
            return {}

    def save_meta(self, meta: dict):
        with open(self._path('meta'), 'w', encoding='utf-8') as f:
            json.dump(meta, f, indent=2, ensure_ascii=False)

    def export_backup(self) -> dict:
        """Snapshot every collection and record the backup time."""
        meta = self.meta()
        meta['last_backup_at'] = datetime.now().isoformat()
        self.save_meta(meta)

        backup = {'meta': meta}
        for collection in COLLECTIONS:
            backup[collection] = self.all(collection)
        return backup

    def import_backup(self, data: dict):
        """Replace all collections with the contents of a backup."""
        if not isinstance(data, dict) or any(key not in data for key in BACKUP_REQUIRED_KEYS):
            raise ValueError("Invalid backup file")

        for collection in COLLECTIONS:
            if collection in data:
                self.replace(collection, list(data[collection] or []))
        self.save_meta(dict(data['meta'] or {}))
        logger.info("Imported backup into %s", self.data_dir)
