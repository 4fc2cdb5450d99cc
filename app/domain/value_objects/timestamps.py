from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from .. import clock
from ..errors import ValidationError


def _as_utc(value: Optional[datetime], label: str) -> datetime:
    if not isinstance(value, datetime):
        raise ValidationError(f"{label} is not a valid date")
    if value.tzinfo is None:
        # stored timestamps are UTC
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class TimeStamps:
    """Audit triple with soft-delete semantics."""

    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    def __post_init__(self):
        created = _as_utc(self.created_at, "Creation date")
        updated = _as_utc(self.updated_at, "Update date")
        if updated < created:
            raise ValidationError("Update date cannot be earlier than creation date")
        deleted = None
        if self.deleted_at is not None:
            deleted = _as_utc(self.deleted_at, "Deletion date")
            if deleted < created:
                raise ValidationError("Deletion date cannot be earlier than creation date")
        object.__setattr__(self, "created_at", created)
        object.__setattr__(self, "updated_at", updated)
        object.__setattr__(self, "deleted_at", deleted)

    @classmethod
    def create(cls) -> "TimeStamps":
        current = clock.now()
        return cls(current, current)

    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def mark_as_updated(self) -> "TimeStamps":
        return TimeStamps(self.created_at, max(clock.now(), self.created_at), self.deleted_at)

    def mark_as_deleted(self) -> "TimeStamps":
        current = max(clock.now(), self.created_at)
        return TimeStamps(self.created_at, current, current)

    def days_since_creation(self) -> int:
        return int((clock.now() - self.created_at).total_seconds() // 86400)

    def hours_since_last_update(self) -> int:
        return int((clock.now() - self.updated_at).total_seconds() // 3600)

    def was_recently_updated(self, threshold_hours: int = 1) -> bool:
        return self.hours_since_last_update() <= threshold_hours

    def to_dict(self) -> dict:
        return {
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "deleted_at": self.deleted_at,
        }
