import copy
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from jobmarket.models.kv import KvEntry


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class KeyValueStore:
    """JSON values addressed by string keys, backed by the ``kv_store`` table.

    Writes are staged on the caller's session; nothing is committed here, so
    a repository operation that touches several keys commits them together.
    Values handed out are copies: callers mutate them freely and write them
    back with ``set``.
    """

    def __init__(self, db: Session):
        self.db = db
        # Rows read through this session stay referenced; the identity map
        # is weak and an UPDATE must carry the version that was read.
        self._loaded: dict[str, KvEntry] = db.info.setdefault("kv_entries", {})

    def _hold(self, entry: KvEntry) -> KvEntry:
        self._loaded[entry.key] = entry
        return entry

    def _entry(self, key: str) -> KvEntry | None:
        entry = self.db.get(KvEntry, key)
        if entry is None:
            self._loaded.pop(key, None)
            return None
        return self._hold(entry)

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._entry(key)
        if entry is None:
            return default
        return copy.deepcopy(entry.value)

    def set(self, key: str, value: Any) -> None:
        entry = self._entry(key)
        now = _now()
        if entry is None:
            self.db.add(self._hold(KvEntry(key=key, value=copy.deepcopy(value), updated_at=now)))
            # Make the new row visible to later reads in the same operation
            self.db.flush()
        else:
            entry.value = copy.deepcopy(value)
            entry.updated_at = now

    def delete(self, key: str) -> bool:
        entry = self._entry(key)
        if entry is None:
            return False
        self.db.delete(entry)
        self.db.flush()
        return True

    def mget(self, keys: list[str]) -> list[Any]:
        """Values for ``keys`` in the same order; missing keys are skipped."""
        if not keys:
            return []
        self.db.flush()
        rows = self.db.query(KvEntry).filter(KvEntry.key.in_(keys)).all()
        by_key = {row.key: self._hold(row).value for row in rows}
        return [copy.deepcopy(by_key[k]) for k in keys if k in by_key]

    def get_by_prefix(self, prefix: str) -> list[tuple[str, Any]]:
        self.db.flush()
        rows = (
            self.db.query(KvEntry)
            .filter(KvEntry.key.startswith(prefix, autoescape=True))
            .order_by(KvEntry.key)
            .all()
        )
        return [(row.key, copy.deepcopy(self._hold(row).value)) for row in rows]

    def append(self, key: str, item: str) -> list[str]:
        """Append ``item`` to the list stored at ``key`` and return the new list."""
        items = self.get(key) or []
        items.append(item)
        self.set(key, items)
        return items

    def remove(self, key: str, item: str) -> list[str]:
        """Drop ``item`` from the list at ``key``; absent keys are not created."""
        current = self.get(key)
        if not current or item not in current:
            return current or []
        items = [i for i in current if i != item]
        self.set(key, items)
        return items
