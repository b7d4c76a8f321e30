# backend/session_booking/auth.py
"""
Caller identity.

The gateway authenticates the caller and forwards only the normalized
identity as headers:

    X-Principal-Id:   integer principal id
    X-Principal-Role: requester | provider | admin

This service trusts those headers and never sees raw credentials.
"""

from dataclasses import dataclass
from enum import Enum

from fastapi import Header

from .exceptions import AuthenticationError, AuthorizationError


class Role(str, Enum):
    REQUESTER = "requester"
    PROVIDER = "provider"
    ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_provider(self) -> bool:
        return self.role == Role.PROVIDER


def get_principal(
    x_principal_id: str | None = Header(None),
    x_principal_role: str | None = Header(None),
) -> Principal:
    """FastAPI dependency: resolve the forwarded identity or fail with 401."""
    if not x_principal_id or not x_principal_role:
        raise AuthenticationError("Please log in to access this feature")

    try:
        principal_id = int(x_principal_id)
        role = Role(x_principal_role.strip().lower())
    except ValueError:
        raise AuthenticationError("Your session is invalid. Please log in again.") from None

    if principal_id <= 0:
        raise AuthenticationError("Your session is invalid. Please log in again.")

    return Principal(id=principal_id, role=role)


# ── Role checks (used by services) ──────────────────────────────────────


def ensure_provider(principal: Principal) -> None:
    if principal.role != Role.PROVIDER:
        raise AuthorizationError("Only providers can manage availability")


def ensure_requester(principal: Principal) -> None:
    if principal.role != Role.REQUESTER:
        raise AuthorizationError("Only requesters can book sessions")


def ensure_admin(principal: Principal) -> None:
    if principal.role != Role.ADMIN:
        raise AuthorizationError("Only admins can access this resource")


def ensure_reviewer(principal: Principal) -> None:
    """Admins review every request; providers review requests addressed to them."""
    if principal.role not in (Role.ADMIN, Role.PROVIDER):
        raise AuthorizationError("Only admins or providers can review session requests")
