# nextplay/db/records.py
"""Child and injury lookups, with optional expansion of owner references."""
from typing import Optional

from bson import ObjectId

from nextplay import db

PARENT_FIELDS = {"name": 1, "email": 1}
CHILD_FIELDS = {"name": 1, "age": 1, "gender": 1, "sport": 1, "parent": 1}


def _parent_summary(parent_id) -> Optional[dict]:
    if parent_id is None:
        return None
    return db.users().find_one({"_id": parent_id}, PARENT_FIELDS)


def expand_parent(child: dict) -> dict:
    """Replace `child.parent` with {_id, name, email} when the user still exists."""
    ref = child.get("parent")
    if isinstance(ref, dict):
        return child
    parent = _parent_summary(ref)
    if parent:
        child = dict(child)
        child["parent"] = parent
    return child


def find_child_by_id(child_id: ObjectId, with_parent: bool = False) -> Optional[dict]:
    child = db.children().find_one({"_id": child_id})
    if child and with_parent:
        child = expand_parent(child)
    return child


def find_injury_by_id(injury_id: ObjectId, with_parent: bool = False) -> Optional[dict]:
    """
    The child reference is always expanded: ownership of an injury is only
    known through its child.
    """
    injury = db.injuries().find_one({"_id": injury_id})
    if not injury:
        return None
    child = db.children().find_one({"_id": injury.get("child")}, CHILD_FIELDS)
    if child is not None:
        injury = dict(injury)
        injury["child"] = expand_parent(child) if with_parent else child
    return injury


def injuries_for_child(child_id: ObjectId, newest_first: bool = True) -> list:
    direction = -1 if newest_first else 1
    return list(db.injuries().find({"child": child_id}).sort("date", direction))


def with_injuries(child: dict) -> dict:
    child = dict(child)
    child["injuries"] = injuries_for_child(child["_id"])
    return child


def expanded_injuries(query: dict) -> list:
    """Injuries matching `query`, newest first, each with child and child.parent expanded."""
    injuries = list(db.injuries().find(query).sort("date", -1))
    child_ids = list({i.get("child") for i in injuries if i.get("child") is not None})
    kids = {c["_id"]: expand_parent(c) for c in db.children().find({"_id": {"$in": child_ids}}, CHILD_FIELDS)}
    out = []
    for injury in injuries:
        injury = dict(injury)
        if injury.get("child") in kids:
            injury["child"] = kids[injury["child"]]
        out.append(injury)
    return out
