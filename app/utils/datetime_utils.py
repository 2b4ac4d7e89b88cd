from datetime import datetime, timezone


def utcnow() -> datetime:
    """Ora corrente in UTC senza tzinfo, il formato salvato nel database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Normalizza un datetime (con o senza fuso orario) in UTC naive."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
