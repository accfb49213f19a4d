import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update, delete, func

from core.cache.score_cache import CacheEntry
from database.models import ScoreCacheEntry
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps come back naive from SQLite; they are stored as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _kind(key: str) -> str:
    return key.split(":", 1)[0]


class ScoreCacheRepository(BaseRepository):
    def fetch(self, key: str) -> Optional[CacheEntry]:
        row = self.db.get(ScoreCacheEntry, key)
        if row is None:
            return None
        return CacheEntry(
            key=row.key,
            payload=row.payload,
            created_at=_utc(row.created_at),
            expires_at=_utc(row.expires_at),
            hit_count=row.hit_count or 0,
            last_accessed_at=_utc(row.last_accessed_at),
            projections={
                name: getattr(row, name)
                for name in ("overall_score", "grade", "percentile", "qualified")
                if getattr(row, name) is not None
            },
        )

    def upsert(self, entry: CacheEntry) -> None:
        """INSERT ... ON CONFLICT (key) DO UPDATE; merge() on other dialects."""
        values = {
            "key": entry.key,
            "kind": _kind(entry.key),
            "payload": entry.payload,
            "overall_score": entry.projections.get("overall_score"),
            "grade": entry.projections.get("grade"),
            "percentile": entry.projections.get("percentile"),
            "qualified": entry.projections.get("qualified"),
            "hit_count": entry.hit_count,
            "created_at": _utc(entry.created_at),
            "last_accessed_at": _utc(entry.last_accessed_at),
            "expires_at": _utc(entry.expires_at),
        }

        if self.dialect_name == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        elif self.dialect_name == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            self.db.merge(ScoreCacheEntry(**values))
            return

        stmt = insert(ScoreCacheEntry).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[ScoreCacheEntry.key],
            set_={name: stmt.excluded[name] for name in values if name != "key"},
        )
        self.db.execute(stmt)

    def touch(self, key: str, accessed_at: datetime) -> None:
        # Atomic in SQL, so concurrent hits are not lost
        self.db.execute(
            update(ScoreCacheEntry)
            .where(ScoreCacheEntry.key == key)
            .values(hit_count=ScoreCacheEntry.hit_count + 1, last_accessed_at=_utc(accessed_at))
        )

    def delete(self, key: str) -> bool:
        result = self.db.execute(delete(ScoreCacheEntry).where(ScoreCacheEntry.key == key))
        return result.rowcount > 0

    def delete_prefix(self, prefix: str) -> int:
        escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        result = self.db.execute(
            delete(ScoreCacheEntry).where(ScoreCacheEntry.key.like(f"{escaped}%", escape="\\"))
        )
        return result.rowcount

    def delete_expired(self, now: datetime) -> int:
        result = self.db.execute(delete(ScoreCacheEntry).where(ScoreCacheEntry.expires_at <= _utc(now)))
        return result.rowcount

    def count(self) -> int:
        return self.db.execute(select(func.count()).select_from(ScoreCacheEntry)).scalar_one()
