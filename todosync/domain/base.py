from datetime import UTC, datetime


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how SQLite round-trips DateTime columns."""
    return datetime.now(UTC).replace(tzinfo=None)
