# nextplay/db/identities.py
"""
Identity lookups.

`resolve_identity` is the single place the live role comes from. The role
embedded in a session credential is a snapshot taken at login, so every
authorization decision re-reads the identity here instead of trusting it.
"""
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId

from nextplay import db
from nextplay.errors import IdentityNotFound

_SECRET_FIELDS = (
    "password",
    "emailVerificationToken",
    "emailVerificationExpires",
    "passwordResetToken",
    "passwordResetExpires",
)


def find_identity_by_id(identity_id) -> Optional[dict]:
    try:
        oid = identity_id if isinstance(identity_id, ObjectId) else ObjectId(str(identity_id))
    except (InvalidId, TypeError):
        return None
    return db.users().find_one({"_id": oid})


def find_identity_by_email(email: str) -> Optional[dict]:
    """Emails are stored lowercased, so lookups are case-insensitive."""
    email = (email or "").strip().lower()
    if not email:
        return None
    return db.users().find_one({"email": email})


def resolve_identity(identity_id) -> dict:
    identity = find_identity_by_id(identity_id)
    if not identity:
        raise IdentityNotFound(str(identity_id))
    return identity


def public_user(doc: dict) -> dict:
    """Copy of a user document with hashes and one-time tokens removed."""
    return {k: v for k, v in doc.items() if k not in _SECRET_FIELDS}
