# nextplay/db/__init__.py
from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database

from nextplay import settings

_client: Optional[MongoClient] = None
_database: Optional[Database] = None


def get_db() -> Database:
    """
    Lazily open the Mongo connection so importing the app never touches the network.
    Tests swap `_database` for a mongomock database.
    """
    global _client, _database
    if _database is None:
        _client = MongoClient(settings.MONGO_URI)
        _database = _client[settings.MONGO_DB]
    return _database


# --- Collections (one source of truth) ---
def users():
    return get_db()["users"]


def children():
    return get_db()["children"]


def injuries():
    return get_db()["injuries"]


def activity_logs():
    return get_db()["activity_logs"]


def audit_events():
    return get_db()["audit_events"]
