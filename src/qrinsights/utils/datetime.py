"""UTC datetime helpers and human-relative time labels."""

from datetime import date, datetime, timedelta, timezone
from typing import Optional


def now_utc() -> datetime:
    """Get current UTC datetime as NAIVE, matching how the store keeps timestamps."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def now_utc_naive() -> datetime:
    """Alias for now_utc(); used as a column default."""
    return now_utc()


def relative_time_label(created_at: datetime, now: Optional[datetime] = None) -> str:
    """
    Describe how long ago created_at was.

    Under an hour -> "<m>m ago", under a day -> "<h>h ago", else "<d>d ago".
    Units are truncated, never rounded up.
    """
    now = now or now_utc()
    if created_at.tzinfo is not None:
        created_at = created_at.astimezone(timezone.utc).replace(tzinfo=None)
    elapsed = max(now - created_at, timedelta(0))
    seconds = int(elapsed.total_seconds())

    if elapsed < timedelta(hours=1):
        return f"{seconds // 60}m ago"
    if elapsed < timedelta(days=1):
        return f"{seconds // 3600}h ago"
    return f"{elapsed.days}d ago"


def to_iso_date(value) -> str:
    """Render a grouped calendar date; SQLite hands these back as strings."""
    if isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m-%d")
    return str(value)
