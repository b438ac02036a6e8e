# nextplay/security/policy.py
"""
Resource ownership guard.

Pure decision logic: no database access and no HTTP. Callers load the
resource (with owner references expanded or not) and hand it in together
with the live principal and the action; the guard answers Allow,
DenyNotFound or DenyForbidden.

Rules:
  * a missing resource is DenyNotFound for everyone
  * admin: read anything, write nothing
  * parent: read/write own resources; anything else looks nonexistent
  * create: parents only; the owner is always the creator
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from bson import ObjectId
from bson.errors import InvalidId

PARENT = "parent"
ADMIN = "admin"


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def is_write(self) -> bool:
        return self is not Action.READ


class Decision(str, Enum):
    ALLOW = "allow"
    DENY_NOT_FOUND = "deny_not_found"
    DENY_FORBIDDEN = "deny_forbidden"


def normalize_role(role: Optional[str]) -> str:
    return (role or "").strip().lower()


def canonical_id(ref: Any) -> Optional[str]:
    """
    Reduce an owner reference to one comparable string.

    Accepts an ObjectId, its hex string, or an expanded document carrying
    `_id` (as produced when the parent/child reference is populated).
    """
    if ref is None:
        return None
    if isinstance(ref, Mapping):
        return canonical_id(ref.get("_id"))
    if isinstance(ref, ObjectId):
        return str(ref)
    s = str(ref).strip()
    if not s:
        return None
    try:
        return str(ObjectId(s))
    except (InvalidId, TypeError):
        return s


def child_owner_id(child: Mapping) -> Optional[str]:
    return canonical_id(child.get("parent"))


def injury_owner_id(injury: Mapping) -> Optional[str]:
    """Injury -> child -> parent. The child must be expanded to know the owner."""
    child = injury.get("child")
    if not isinstance(child, Mapping):
        return None
    return child_owner_id(child)


@dataclass(frozen=True)
class ResourceKind:
    label: str
    plural: str
    owner_of: Callable[[Mapping], Optional[str]]


CHILD = ResourceKind("Child", "children", child_owner_id)
INJURY = ResourceKind("Injury", "injuries", injury_owner_id)


@dataclass(frozen=True)
class Principal:
    """A verified caller with the role read from storage on this request."""
    identity_id: str
    role: str
    email: str = ""
    name: str = ""
    identity: dict = field(default_factory=dict, compare=False, repr=False)

    @staticmethod
    def from_identity(identity: Mapping) -> "Principal":
        return Principal(
            identity_id=canonical_id(identity.get("_id")) or "",
            role=normalize_role(identity.get("role") or PARENT),
            email=identity.get("email") or "",
            name=identity.get("name") or "",
            identity=dict(identity),
        )

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN

    @property
    def is_parent(self) -> bool:
        return self.role == PARENT

    def owns(self, owner_id: Optional[str]) -> bool:
        return owner_id is not None and owner_id == canonical_id(self.identity_id)


def check_create(principal: Principal) -> Decision:
    return Decision.ALLOW if principal.is_parent else Decision.DENY_FORBIDDEN


def check_access(
    principal: Principal,
    kind: ResourceKind,
    resource: Optional[Mapping],
    action: Action,
) -> Decision:
    if action is Action.CREATE:
        return check_create(principal)

    if resource is None:
        return Decision.DENY_NOT_FOUND

    if principal.is_admin:
        return Decision.DENY_FORBIDDEN if action.is_write else Decision.ALLOW

    if principal.is_parent:
        if principal.owns(kind.owner_of(resource)):
            return Decision.ALLOW
        # same answer as a missing id so ownership never leaks
        return Decision.DENY_NOT_FOUND

    return Decision.DENY_FORBIDDEN
