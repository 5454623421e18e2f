"""Identity context: current actor id + resolved role, and the role gates."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from pawlink.db.store import RecordStore
from pawlink.errors import AuthorizationError

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    CITIZEN = "citizen"
    RESCUER = "rescuer"
    SHELTER = "shelter"
    VET = "vet"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: str | None) -> "Role":
        """Map a stored role string to a Role. Unknown/missing → citizen.

        The identity provider labels citizens ``user``.
        """
        if not value:
            return cls.CITIZEN
        value = value.strip().lower()
        if value == "user":
            return cls.CITIZEN
        try:
            return cls(value)
        except ValueError:
            logger.warning("Unknown role %r, treating as citizen", value)
            return cls.CITIZEN


_RESPONDER_ROLES = frozenset({Role.RESCUER, Role.SHELTER, Role.VET})


def can_act_on_reports(role: Role) -> bool:
    return role in _RESPONDER_ROLES or role is Role.ADMIN


def can_be_assigned(role: Role) -> bool:
    """Whether a report may be routed to an actor with this role."""
    return role in _RESPONDER_ROLES


def can_submit_reports(role: Role) -> bool:
    return role is Role.CITIZEN


@dataclass(frozen=True)
class Actor:
    id: str
    role: Role
    display_name: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def require_report_access(actor: Actor | None) -> Actor:
    """Raise AuthorizationError unless the actor may view/act on reports."""
    if actor is None or not can_act_on_reports(actor.role):
        raise AuthorizationError("Restricted access: only rescuers, shelters, vets and admins can view reports")
    return actor


class IdentityContext:
    """Exposes the current actor, as resolved from the identity provider's user id."""

    def __init__(self, actor: Actor | None = None):
        self._actor = actor

    def get_current_user(self) -> Actor | None:
        return self._actor

    @property
    def is_authenticated(self) -> bool:
        return self._actor is not None

    @property
    def role(self) -> Role | None:
        return self._actor.role if self._actor else None

    @classmethod
    async def from_user_id(cls, store: RecordStore, user_id: str | None) -> "IdentityContext":
        """Resolve role + display name from the profiles table.

        A user without a profile row is a citizen.
        """
        if not user_id:
            return cls(None)
        rows = await store.select("profiles", {"id": user_id}, limit=1)
        if not rows:
            return cls(Actor(id=user_id, role=Role.CITIZEN))
        profile = rows[0]
        return cls(Actor(
            id=user_id,
            role=Role.parse(profile.get("role")),
            display_name=profile.get("full_name") or "",
        ))


async def lookup_role(store: RecordStore, user_id: str) -> Role | None:
    """Role of an existing profile, or None if there is no such profile."""
    rows = await store.select("profiles", {"id": user_id}, limit=1)
    if not rows:
        return None
    return Role.parse(rows[0].get("role"))
