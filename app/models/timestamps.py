# app/models/timestamps.py
from datetime import datetime, timezone

from sqlalchemy import event


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def _touch_updated_at(mapper, connection, target) -> None:
    # Always wins over whatever the caller put in updated_at.
    target.updated_at = utcnow()


def track_updated_at(*models: type) -> None:
    """
    Keep `updated_at` current on every ORM update of the given models.

    Registered as a `before_update` mapper event, so it runs inside the
    same flush (and transaction) as the update itself. Bulk UPDATE
    statements bypass mapper events and must set the column themselves.
    """
    for model in models:
        if not event.contains(model, "before_update", _touch_updated_at):
            event.listen(model, "before_update", _touch_updated_at)
