# nextplay/utils/audit.py
"""
Security audit trail in the `audit_events` collection.

One document per refused or failed request:

    {ts, event, status, detail,
     actor: {user_id, email, role} | None,
     request: {id, method, path, ip, user_agent}}

`actor` is the live identity the authorization layer resolved before the
refusal; it is missing when the credential itself was rejected.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from nextplay import db

logger = logging.getLogger(__name__)

AUTHN_FAILED = "authn_failed"
AUTHZ_DENIED = "authz_denied"
SERVER_ERROR = "server_error"


def actor_from_principal(principal) -> dict:
    return {"user_id": principal.identity_id, "email": principal.email, "role": principal.role}


def ensure_audit_indexes() -> None:
    events = db.audit_events()
    events.create_index([("ts", DESCENDING)])
    events.create_index([("event", ASCENDING), ("ts", DESCENDING)])
    events.create_index("actor.user_id", sparse=True)


def record_event(
    event: str,
    *,
    status: int,
    detail: Optional[str] = None,
    actor: Optional[dict] = None,
    request: Optional[dict] = None,
) -> None:
    """Append one event. A storage failure is logged; the response still goes out."""
    doc = {
        "ts": datetime.now(timezone.utc),
        "event": event,
        "status": status,
        "detail": detail,
        "actor": actor,
        "request": request or {},
    }
    try:
        db.audit_events().insert_one(doc)
    except PyMongoError:
        logger.exception("audit write failed: event=%s status=%s", event, status)
