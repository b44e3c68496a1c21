"""Access decisions for feature requests.

Pure functions: given who is asking (a ``Principal`` or ``None`` for
anonymous), what they want to do, and a snapshot of the target request,
return an ``Outcome``. Nothing here touches the database or raises for an
expected denial; the HTTP layer maps denials to status codes.

Every operation checks in the same order: authentication, input, existence,
rights. A missing request is therefore reported as ``not_found`` even to a
caller who would also lack rights to change it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol


class Role(StrEnum):
    USER = "user"
    ADMIN = "admin"


class Status(StrEnum):
    PENDING = "pending"
    PLANNED = "planned"
    COMPLETED = "completed"
    REJECTED = "rejected"


STATUSES = frozenset(s.value for s in Status)


class Operation(StrEnum):
    READ = "read"
    CREATE = "create"
    UPVOTE = "upvote"
    REMOVE_UPVOTE = "remove_upvote"
    DELETE = "delete"
    CHANGE_STATUS = "change_status"


class Denial(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class Principal:
    """A verified identity. Anonymous callers are represented by ``None``."""

    id: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class OwnedResource(Protocol):
    owner_id: str


@dataclass(frozen=True)
class Outcome:
    denial: Denial | None = None
    detail: str | None = None
    value: Any = None

    @property
    def ok(self) -> bool:
        return self.denial is None

    @classmethod
    def allow(cls, value: Any = None) -> Outcome:
        return cls(value=value)

    @classmethod
    def deny(cls, denial: Denial, detail: str) -> Outcome:
        return cls(denial=denial, detail=detail)


ALLOW = Outcome()

_NEEDS_RESOURCE = frozenset(
    {
        Operation.READ,
        Operation.UPVOTE,
        Operation.REMOVE_UPVOTE,
        Operation.DELETE,
        Operation.CHANGE_STATUS,
    }
)


def decide(
    principal: Principal | None,
    operation: Operation,
    resource: OwnedResource | None = None,
    *,
    new_status: str | None = None,
) -> Outcome:
    """Decide whether ``principal`` may perform ``operation`` on ``resource``."""
    if operation != Operation.READ and principal is None:
        return Outcome.deny(Denial.UNAUTHENTICATED, "Not authenticated")

    if operation == Operation.CHANGE_STATUS and new_status not in STATUSES:
        return Outcome.deny(
            Denial.INVALID_INPUT,
            f"Invalid status {new_status!r}; expected one of {', '.join(Status)}",
        )

    if operation in _NEEDS_RESOURCE and resource is None:
        return Outcome.deny(Denial.NOT_FOUND, "Feature request not found")

    if operation == Operation.DELETE:
        if principal.id != resource.owner_id and not principal.is_admin:
            return Outcome.deny(
                Denial.FORBIDDEN, "Only the owner or an admin can delete this request"
            )
    elif operation == Operation.CHANGE_STATUS:
        if not principal.is_admin:
            return Outcome.deny(Denial.FORBIDDEN, "Only admins can change status")

    return ALLOW


def project(
    principal: Principal | None,
    resource: Any,
    *,
    upvote_count: int,
    has_upvoted: bool = False,
) -> dict:
    """Serialize a feature request with the fields derived for this viewer."""
    return {
        "id": resource.id,
        "title": resource.title,
        "description": resource.description,
        "status": resource.status,
        "owner_id": resource.owner_id,
        "created_at": resource.created_at,
        "updated_at": resource.updated_at,
        "upvote_count": int(upvote_count or 0),
        "has_upvoted": bool(has_upvoted) if principal is not None else False,
        "is_owner": principal is not None and principal.id == resource.owner_id,
    }
