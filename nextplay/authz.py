# nextplay/authz.py
"""
Authorization combinator.

Every resource endpoint goes through here:

    credential (auth.verify_credential)
      -> live identity (db.identities.resolve_identity)
      -> ownership guard (security.policy.check_access)

and the first failure short-circuits:

    bad/expired/missing credential  -> 401
    identity deleted since login    -> 401
    DenyNotFound                    -> 404
    DenyForbidden                   -> 403

Usage:
    @router.get("/{child_id}")
    def get_child(access: Authorized = Depends(child_access(Action.READ))):
        ...

    @router.get("/stats", dependencies=[Depends(require_admin)])
    def stats(): ...

Nothing here is cached between requests; a role change is visible on the
very next call.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Depends, Request

from nextplay.auth import token_from_request, verify_credential
from nextplay.db import records
from nextplay.db.identities import resolve_identity
from nextplay.errors import (
    BadRequest,
    Forbidden,
    IdentityNotFound,
    InvalidCredential,
    NotFound,
    Unauthenticated,
)
from nextplay.security.policy import (
    ADMIN,
    CHILD,
    INJURY,
    PARENT,
    Action,
    Decision,
    Principal,
    ResourceKind,
    check_access,
    normalize_role,
)
from nextplay.utils.audit import actor_from_principal

logger = logging.getLogger(__name__)

_VERBS = {Action.CREATE: "create", Action.UPDATE: "edit", Action.DELETE: "delete"}


@dataclass(frozen=True)
class Authorized:
    principal: Principal
    resource: dict


def authenticate(token: Optional[str]) -> Principal:
    try:
        claims = verify_credential(token)
    except InvalidCredential as exc:
        raise Unauthenticated(str(exc))

    try:
        identity = resolve_identity(claims.identity_id)
    except IdentityNotFound:
        logger.info("credential for vanished identity %s", claims.identity_id)
        raise Unauthenticated("User not found")

    principal = Principal.from_identity(identity)
    if normalize_role(claims.role_at_issuance) != principal.role:
        logger.info(
            "stale role in credential for %s: token=%s live=%s",
            principal.identity_id, claims.role_at_issuance, principal.role,
        )
    return principal


def denial_message(principal: Principal, kind: ResourceKind, action: Action) -> str:
    if action is Action.CREATE:
        return f"Only parents can create {kind.plural}"
    if principal.is_admin:
        return f"Admins cannot {_VERBS[action]} {kind.plural}"
    return "Insufficient role"


def enforce(decision: Decision, principal: Principal, kind: ResourceKind, action: Action) -> None:
    if decision is Decision.ALLOW:
        return
    if decision is Decision.DENY_NOT_FOUND:
        raise NotFound(f"{kind.label} not found")
    raise Forbidden(denial_message(principal, kind, action))


def authorize(
    principal: Principal,
    kind: ResourceKind,
    resource: Optional[dict],
    action: Action,
) -> Optional[dict]:
    enforce(check_access(principal, kind, resource, action), principal, kind, action)
    return resource


def parse_object_id(raw: str, label: str) -> ObjectId:
    try:
        return ObjectId(raw)
    except (InvalidId, TypeError):
        raise BadRequest(f"Invalid {label} ID format")


# --- FastAPI dependencies ----------------------------------------------------

def get_principal(request: Request) -> Principal:
    principal = authenticate(token_from_request(request))
    # picked up by AuditMiddleware for denied requests
    request.state.actor = actor_from_principal(principal)
    return principal


def require_role(*allowed_roles: str) -> Callable:
    """
    Usage:
        @router.get("/admin", dependencies=[Depends(require_role("admin"))])
    The role checked is the live one from storage, never the token's.
    """
    allowed = set(normalize_role(r) for r in allowed_roles if r)

    def _dep(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.role not in allowed:
            raise Forbidden("Admin access required" if allowed == {ADMIN} else "Insufficient role")
        return principal

    return _dep


require_admin = require_role(ADMIN)
require_parent = require_role(PARENT)


def require_creator(kind: ResourceKind) -> Callable:
    """Parents only; an admin is refused before the payload is even looked at."""

    def _dep(principal: Principal = Depends(get_principal)) -> Principal:
        authorize(principal, kind, None, Action.CREATE)
        return principal

    return _dep


def child_access(action: Action) -> Callable:
    def _dep(child_id: str, principal: Principal = Depends(get_principal)) -> Authorized:
        oid = parse_object_id(child_id, "child")
        child = records.find_child_by_id(oid, with_parent=principal.is_admin)
        authorize(principal, CHILD, child, action)
        return Authorized(principal=principal, resource=child)

    return _dep


def injury_access(action: Action) -> Callable:
    def _dep(injury_id: str, principal: Principal = Depends(get_principal)) -> Authorized:
        oid = parse_object_id(injury_id, "injury")
        injury = records.find_injury_by_id(oid, with_parent=principal.is_admin)
        authorize(principal, INJURY, injury, action)
        return Authorized(principal=principal, resource=injury)

    return _dep
