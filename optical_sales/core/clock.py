from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def today_compact(now: datetime | None = None) -> str:
    """YYYYMMDD, used in document numbers."""
    return (now or utcnow()).strftime("%Y%m%d")
