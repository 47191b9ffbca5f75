"""
Cache Gate
──────────
Decides whether the dataset payload can be served from the stored snapshot
or must be rebuilt. Freshness is a pure function of the snapshot's write
time, the current time and the TTL; the database only stores the value.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

from sqlalchemy.orm import Session

from birthlottery.models.snapshot import DatasetSnapshot

logger = logging.getLogger("birthlottery.cache")


@dataclass(frozen=True)
class CacheSnapshot:
    payload: dict
    written_at: datetime      # naive UTC

    def age_seconds(self, now: datetime) -> float:
        return (now - self.written_at).total_seconds()


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def is_fresh(snapshot: Optional[CacheSnapshot], now: datetime, ttl_seconds: int) -> bool:
    """A snapshot is valid while its age is strictly below the TTL."""
    if snapshot is None:
        return False
    return snapshot.age_seconds(now) < ttl_seconds


def read_snapshot(db: Session) -> Optional[CacheSnapshot]:
    row = db.query(DatasetSnapshot).order_by(DatasetSnapshot.id).first()
    if row is None:
        return None
    return CacheSnapshot(payload=json.loads(row.payload), written_at=row.written_at)


def write_snapshot(db: Session, payload: dict, now: Optional[datetime] = None) -> CacheSnapshot:
    """Overwrite the single global snapshot in one transaction."""
    now = now or utcnow()
    body = json.dumps(payload, ensure_ascii=False)

    row = db.query(DatasetSnapshot).order_by(DatasetSnapshot.id).first()
    if row is None:
        row = DatasetSnapshot(payload=body, written_at=now)
        db.add(row)
    else:
        row.payload = body
        row.written_at = now

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    return CacheSnapshot(payload=payload, written_at=now)


def resolve(
    db: Session,
    rebuild: Callable[[], dict],
    ttl_seconds: int,
    now: Optional[datetime] = None,
    force: bool = False,
) -> Tuple[dict, bool]:
    """
    Serve the snapshot when fresh, otherwise run ``rebuild`` and store its
    result. Returns ``(payload, served_from_cache)``.

    Errors raised by ``rebuild`` propagate and leave the old snapshot alone.
    """
    now = now or utcnow()

    if not force:
        snapshot = read_snapshot(db)
        if is_fresh(snapshot, now, ttl_seconds):
            logger.info(f"Snapshot hit (age {snapshot.age_seconds(now):.0f}s)")
            return snapshot.payload, True
        logger.info("Snapshot missing or expired, rebuilding dataset")
    else:
        logger.info("Forced dataset rebuild")

    payload = rebuild()
    write_snapshot(db, payload, now)
    return payload, False
