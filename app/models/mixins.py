# app/models/mixins.py
from datetime import datetime, timezone
from typing import Optional
import secrets

from sqlalchemy import Column, DateTime


def generate_id():
    """Generate a short random hex token for use as a primary key"""
    return secrets.token_hex(8)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite hands timestamps back without tzinfo)"""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def later_of(current: Optional[datetime], candidate: datetime) -> datetime:
    """Return whichever watermark is later; watermarks never move backward"""
    current = ensure_utc(current)
    candidate = ensure_utc(candidate)
    if current is not None and current >= candidate:
        return current
    return candidate


class CreatedAtMixin:
    """Mixin to add an immutable created_at column to models"""
    # Stamped in Python so timestamps keep sub-second precision on every backend
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
