import uuid
from datetime import datetime, timezone


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_valid_id(value: str | None) -> bool:
    if not value:
        return False
    try:
        return uuid.UUID(value).hex == value
    except (ValueError, AttributeError, TypeError):
        return False
