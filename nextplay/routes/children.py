# nextplay/routes/children.py
from datetime import datetime, timezone

from bson import ObjectId
from fastapi import APIRouter, Depends, Query, Request

from nextplay import db
from nextplay.authz import Authorized, child_access, get_principal, require_creator
from nextplay.db.records import expand_parent, injuries_for_child, with_injuries
from nextplay.schemas.records import ChildIn, ChildUpdate, load_payload
from nextplay.security.policy import CHILD, Action, Principal
from nextplay.services import reports
from nextplay.utils.logger import log_activity
from nextplay.utils.serialize import to_jsonable

router = APIRouter(prefix="/api/children", tags=["children"])


def _utcnow():
    return datetime.now(timezone.utc)


@router.get("")
def list_children(principal: Principal = Depends(get_principal)):
    if principal.is_admin:
        cursor = db.children().find({}).sort("createdAt", -1)
        children = [with_injuries(expand_parent(c)) for c in cursor]
    else:
        cursor = db.children().find({"parent": ObjectId(principal.identity_id)}).sort("createdAt", -1)
        children = [with_injuries(c) for c in cursor]
    return to_jsonable(children)


@router.post("", status_code=201)
async def create_child(request: Request, principal: Principal = Depends(require_creator(CHILD))):
    body = await load_payload(request, ChildIn)
    parent_id = ObjectId(principal.identity_id)
    now = _utcnow()
    doc = {
        **body.model_dump(),
        "parent": parent_id,
        "injuries": [],
        "createdAt": now,
        "updatedAt": now,
    }
    doc["_id"] = db.children().insert_one(doc).inserted_id
    db.users().update_one({"_id": parent_id}, {"$push": {"children": doc["_id"]}})

    log_activity(user_id=principal.identity_id, action="child_create", metadata={"child_id": str(doc["_id"])})
    return to_jsonable(doc)


@router.get("/{child_id}")
def get_child(access: Authorized = Depends(child_access(Action.READ))):
    return to_jsonable(with_injuries(access.resource))


@router.put("/{child_id}")
async def update_child(request: Request, access: Authorized = Depends(child_access(Action.UPDATE))):
    body = await load_payload(request, ChildUpdate)
    child_id = access.resource["_id"]
    db.children().update_one(
        {"_id": child_id},
        {"$set": {**body.model_dump(exclude_none=True), "updatedAt": _utcnow()}},
    )
    log_activity(user_id=access.principal.identity_id, action="child_update", metadata={"child_id": str(child_id)})
    return to_jsonable(with_injuries(db.children().find_one({"_id": child_id})))


@router.delete("/{child_id}")
def delete_child(access: Authorized = Depends(child_access(Action.DELETE))):
    child_id = access.resource["_id"]
    db.injuries().delete_many({"child": child_id})
    db.children().delete_one({"_id": child_id})
    db.users().update_one({"_id": access.resource.get("parent")}, {"$pull": {"children": child_id}})

    log_activity(user_id=access.principal.identity_id, action="child_delete", metadata={"child_id": str(child_id)})
    return {"message": "Child deleted successfully"}


@router.get("/{child_id}/export")
def export_child(
    format: str = Query("csv"),
    access: Authorized = Depends(child_access(Action.READ)),
):
    fmt = reports.check_format(format)
    child = access.resource
    injuries = injuries_for_child(child["_id"])
    if fmt == "csv":
        content = reports.child_history_csv(child, injuries)
    else:
        content = reports.child_history_pdf(child, injuries)

    log_activity(
        user_id=access.principal.identity_id,
        action="child_export",
        metadata={"child_id": str(child["_id"]), "format": fmt},
    )
    return reports.attachment(content, fmt, f"{child.get('name', 'child')}-injury-history")
