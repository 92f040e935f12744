"""
Venue Admin — Requester Resolution
====================================

What:  Turns verified JWT claims into one of four requester variants:
       SuperAdmin, Admin, SubAdmin or Staff.
How:   The tier is decided once, here, from two independent signals that
       the login service may emit: legacy boolean flags (`is_superadmin`,
       `is_admin`, `is_subadmin`) and the creator-tier tag `added_by`
       (SA / AD / SUB). Each variant only carries the attributes its tier
       uses, so downstream code never re-inspects raw claims.

Precedence:
    SuperAdmin → Admin → SubAdmin, first match wins. Either signal selects
    a tier on its own; when they disagree the higher tier is taken.
    Anything else is Staff.

Accounts vs employees:
    Admin accounts carry tier flags and no role. Employees carry a `role`
    id whose permission rows are checked per menu; their tier comes from
    `added_by`.
"""

import enum
import uuid
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Union

from venue_admin.exceptions import ValidationError


class Tier(str, enum.Enum):
    """Creator tier tag stored on roles as `added_by`."""

    SUPER_ADMIN = "SA"
    ADMIN = "AD"
    SUB_ADMIN = "SUB"


@dataclass(frozen=True)
class SuperAdmin:
    user_id: Optional[str] = None
    role_id: Optional[uuid.UUID] = None

    tier = Tier.SUPER_ADMIN


@dataclass(frozen=True)
class Admin:
    city_id: Optional[uuid.UUID] = None
    user_id: Optional[str] = None
    role_id: Optional[uuid.UUID] = None

    tier = Tier.ADMIN


@dataclass(frozen=True)
class SubAdmin:
    city_id: Optional[uuid.UUID] = None
    venue_ids: FrozenSet[uuid.UUID] = field(default_factory=frozenset)
    ground_ids: FrozenSet[uuid.UUID] = field(default_factory=frozenset)
    user_id: Optional[str] = None
    role_id: Optional[uuid.UUID] = None

    tier = Tier.SUB_ADMIN


@dataclass(frozen=True)
class Staff:
    """Requester without a tier, typically an employee holding only a role."""

    city_id: Optional[uuid.UUID] = None
    venue_ids: FrozenSet[uuid.UUID] = field(default_factory=frozenset)
    ground_ids: FrozenSet[uuid.UUID] = field(default_factory=frozenset)
    user_id: Optional[str] = None
    role_id: Optional[uuid.UUID] = None

    tier = None


Requester = Union[SuperAdmin, Admin, SubAdmin, Staff]


# ── Claim Parsing ─────────────────────────────────────────────────────────

def _reference_id(value: Any) -> Optional[str]:
    """A reference claim may be a bare id or a populated object."""
    if value is None or value == "":
        return None
    if isinstance(value, Mapping):
        value = value.get("_id") or value.get("id")
        if value is None:
            return None
    return str(value)


def _to_uuid(value: Any, claim: str) -> Optional[uuid.UUID]:
    raw = _reference_id(value)
    if raw is None:
        return None
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise ValidationError(message="Invalid authorization token", field=claim)


def _to_uuid_set(values: Any, claim: str) -> FrozenSet[uuid.UUID]:
    if not values:
        return frozenset()
    if not isinstance(values, Iterable) or isinstance(values, (str, bytes, Mapping)):
        values = [values]
    ids = (_to_uuid(v, claim) for v in values)
    return frozenset(i for i in ids if i is not None)


def resolve_tier(claims: Mapping[str, Any]) -> Optional[Tier]:
    added_by = str(claims.get("added_by") or "").upper()
    if claims.get("is_superadmin") or added_by == Tier.SUPER_ADMIN.value:
        return Tier.SUPER_ADMIN
    if claims.get("is_admin") or added_by == Tier.ADMIN.value:
        return Tier.ADMIN
    if claims.get("is_subadmin") or added_by == Tier.SUB_ADMIN.value:
        return Tier.SUB_ADMIN
    return None


def requester_from_claims(claims: Mapping[str, Any]) -> Requester:
    """
    Build the requester variant for a decoded token payload.

    Raises:
        ValidationError: a reference claim is not a valid identifier.
    """
    user_id = _reference_id(claims.get("id") or claims.get("_id"))
    role_id = _to_uuid(claims.get("role"), "role")
    city_id = _to_uuid(claims.get("city"), "city")
    venue_ids = _to_uuid_set(claims.get("venue"), "venue")
    ground_ids = _to_uuid_set(claims.get("ground"), "ground")

    tier = resolve_tier(claims)
    if tier is Tier.SUPER_ADMIN:
        return SuperAdmin(user_id=user_id, role_id=role_id)
    if tier is Tier.ADMIN:
        return Admin(city_id=city_id, user_id=user_id, role_id=role_id)
    if tier is Tier.SUB_ADMIN:
        return SubAdmin(
            city_id=city_id,
            venue_ids=venue_ids,
            ground_ids=ground_ids,
            user_id=user_id,
            role_id=role_id,
        )
    return Staff(
        city_id=city_id,
        venue_ids=venue_ids,
        ground_ids=ground_ids,
        user_id=user_id,
        role_id=role_id,
    )


# ── Accessors ─────────────────────────────────────────────────────────────
# Variants without a city/venue/ground assignment report none.

def city_of(requester: Requester) -> Optional[uuid.UUID]:
    return getattr(requester, "city_id", None)


def venues_of(requester: Requester) -> FrozenSet[uuid.UUID]:
    return getattr(requester, "venue_ids", frozenset())


def grounds_of(requester: Requester) -> FrozenSet[uuid.UUID]:
    return getattr(requester, "ground_ids", frozenset())
