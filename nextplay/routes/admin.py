# nextplay/routes/admin.py
from fastapi import APIRouter, Depends, Query

from nextplay import db
from nextplay.authz import require_admin
from nextplay.db.identities import public_user
from nextplay.db.records import expand_parent, expanded_injuries, with_injuries
from nextplay.security.policy import Principal
from nextplay.services import reports
from nextplay.timelines import FULL_PLAY
from nextplay.utils.logger import log_activity
from nextplay.utils.serialize import to_jsonable

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/stats", dependencies=[Depends(require_admin)])
def stats():
    users = db.users()
    injuries = db.injuries()
    total_users = users.count_documents({})
    verified = users.count_documents({"isEmailVerified": True})
    return {
        "totalUsers": total_users,
        "verifiedUsers": verified,
        "unverifiedUsers": total_users - verified,
        "totalChildren": db.children().count_documents({}),
        "totalInjuries": injuries.count_documents({}),
        "activeInjuries": injuries.count_documents({"recoveryStatus": {"$ne": FULL_PLAY}}),
    }


@router.get("/users", dependencies=[Depends(require_admin)])
def list_users():
    out = []
    for user in db.users().find({}).sort("createdAt", -1):
        data = public_user(user)
        data["childrenCount"] = db.children().count_documents({"parent": user["_id"]})
        out.append(data)
    return {"users": to_jsonable(out)}


# ---------- exports ----------
def _injuries_for_export() -> list:
    """Injuries with the owning parent lifted to the top level for the report rows."""
    out = []
    for injury in expanded_injuries({}):
        child = injury.get("child")
        if isinstance(child, dict) and isinstance(child.get("parent"), dict):
            injury["parent"] = child["parent"]
        out.append(injury)
    return out


@router.get("/export/children")
def export_children(format: str = Query("csv"), principal: Principal = Depends(require_admin)):
    fmt = reports.check_format(format)
    children = [with_injuries(expand_parent(c)) for c in db.children().find({}).sort("createdAt", -1)]
    content = reports.children_csv(children) if fmt == "csv" else reports.children_pdf(children)
    log_activity(user_id=principal.identity_id, action="admin_export_children", metadata={"format": fmt})
    return reports.attachment(content, fmt, "children-export")


@router.get("/export/injuries")
def export_injuries(format: str = Query("csv"), principal: Principal = Depends(require_admin)):
    fmt = reports.check_format(format)
    injuries = _injuries_for_export()
    content = reports.injuries_csv(injuries) if fmt == "csv" else reports.injuries_pdf(injuries)
    log_activity(user_id=principal.identity_id, action="admin_export_injuries", metadata={"format": fmt})
    return reports.attachment(content, fmt, "injuries-export")
