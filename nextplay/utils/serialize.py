from datetime import datetime, timezone

from bson import ObjectId


def ensure_aware_utc(dt):
    """Mongo hands back naive datetimes that are really UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_jsonable(value):
    """ObjectIds become hex strings and datetimes ISO-8601 UTC, recursively."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return ensure_aware_utc(value).isoformat()
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value
