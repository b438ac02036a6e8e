# nextplay/routes/injuries.py
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, Query, Request

from nextplay import db
from nextplay.authz import Authorized, authorize, get_principal, injury_access, parse_object_id, require_creator
from nextplay.db.records import expanded_injuries, find_child_by_id, find_injury_by_id
from nextplay.schemas.records import InjuryIn, InjuryUpdate, load_payload
from nextplay.security.policy import CHILD, INJURY, Action, Principal
from nextplay.timelines import RESTING, TIMELINES, progress_percentage, suggested_timeline
from nextplay.utils.logger import log_activity
from nextplay.utils.serialize import to_jsonable

router = APIRouter(prefix="/api/injuries", tags=["injuries"])


def _utcnow():
    return datetime.now(timezone.utc)


def _out(injury: dict) -> dict:
    data = to_jsonable(injury)
    data["progressPercentage"] = progress_percentage(injury.get("recoveryStatus"))
    return data


@router.get("")
def list_injuries(principal: Principal = Depends(get_principal)):
    if principal.is_admin:
        injuries = expanded_injuries({})
    else:
        child_ids = [c["_id"] for c in db.children().find({"parent": ObjectId(principal.identity_id)}, {"_id": 1})]
        injuries = expanded_injuries({"child": {"$in": child_ids}})
    return [_out(i) for i in injuries]


# declared before /{injury_id} so "timelines" is never taken for an id
@router.get("/timelines", dependencies=[Depends(get_principal)])
def timelines(type: Optional[str] = Query(None)):
    if type:
        return suggested_timeline(type).to_dict()
    return [t.to_dict() for t in TIMELINES]


@router.post("", status_code=201)
async def create_injury(request: Request, principal: Principal = Depends(require_creator(INJURY))):
    body = await load_payload(request, InjuryIn)

    child_id = parse_object_id(body.childId, "child")
    # someone else's child looks the same as a missing one
    authorize(principal, CHILD, find_child_by_id(child_id), Action.READ)

    now = _utcnow()
    doc = {
        "child": child_id,
        "type": body.type,
        "description": body.description,
        "date": body.date or now,
        "location": body.location,
        "severity": body.severity,
        "photos": body.photos,
        "notes": body.notes,
        "suggestedTimeline": body.suggestedTimeline or suggested_timeline(body.type).suggested_days,
        "recoveryStatus": RESTING,
        "createdAt": now,
        "updatedAt": now,
    }
    doc["_id"] = db.injuries().insert_one(doc).inserted_id
    db.children().update_one({"_id": child_id}, {"$push": {"injuries": doc["_id"]}})

    log_activity(
        user_id=principal.identity_id,
        action="injury_create",
        metadata={"injury_id": str(doc["_id"]), "child_id": str(child_id)},
    )
    return _out(doc)


@router.get("/{injury_id}")
def get_injury(access: Authorized = Depends(injury_access(Action.READ))):
    return {"injury": _out(access.resource)}


@router.put("/{injury_id}")
async def update_injury(request: Request, access: Authorized = Depends(injury_access(Action.UPDATE))):
    body = await load_payload(request, InjuryUpdate)
    injury_id = access.resource["_id"]

    changes = body.model_dump(exclude_none=True)
    changes["updatedAt"] = _utcnow()
    db.injuries().update_one({"_id": injury_id}, {"$set": changes})

    log_activity(
        user_id=access.principal.identity_id,
        action="injury_update",
        metadata={"injury_id": str(injury_id), "recoveryStatus": body.recoveryStatus},
    )
    return {"injury": _out(find_injury_by_id(injury_id))}


@router.delete("/{injury_id}")
def delete_injury(access: Authorized = Depends(injury_access(Action.DELETE))):
    injury = access.resource
    db.injuries().delete_one({"_id": injury["_id"]})
    child = injury.get("child")
    if isinstance(child, dict):
        db.children().update_one({"_id": child["_id"]}, {"$pull": {"injuries": injury["_id"]}})

    log_activity(user_id=access.principal.identity_id, action="injury_delete", metadata={"injury_id": str(injury["_id"])})
    return {"message": "Injury deleted successfully"}
