"""
Venue Admin — Role-Scoped Query Filters
=========================================

What:  Derives a requester's data scope and turns it into SQLAlchemy WHERE
       clauses for any entity that has city / venue / ground columns.
How:   `resolve_scope()` is a pure function of the requester variant.
       `scope_conditions()` maps that scope onto the columns an entity
       exposes; entities without a given column are simply not filtered
       on it. Every listing, update and removal in the services goes
       through these two functions, so visibility and mutability share a
       single definition.

Scope rules:
    SuperAdmin → unrestricted
    Admin      → city = assigned city
    SubAdmin   → city = assigned city AND venue IN assigned venues
                 (AND ground IN assigned grounds, when grounds are assigned)
    Staff      → no rows

    A SubAdmin with no assigned venues matches no venue-scoped rows.
"""

import uuid
from dataclasses import dataclass
from typing import FrozenSet, List, Optional

from sqlalchemy import false
from sqlalchemy.sql.elements import ColumnElement

from venue_admin.services.requester import (
    Admin,
    Requester,
    SubAdmin,
    SuperAdmin,
    Tier,
)


@dataclass(frozen=True)
class Scope:
    """
    Visibility restriction of one requester.

    A `None` attribute means "no restriction on that dimension"; an empty
    set means "nothing matches".
    """

    tier: Optional[Tier]
    city_id: Optional[uuid.UUID] = None
    venue_ids: Optional[FrozenSet[uuid.UUID]] = None
    ground_ids: Optional[FrozenSet[uuid.UUID]] = None
    deny_all: bool = False

    @property
    def unrestricted(self) -> bool:
        return (
            not self.deny_all
            and self.city_id is None
            and self.venue_ids is None
            and self.ground_ids is None
        )

    def allows_city(self, city_id: Optional[uuid.UUID]) -> bool:
        if self.deny_all:
            return False
        return self.city_id is None or self.city_id == city_id

    def allows_venue(self, venue_id: Optional[uuid.UUID]) -> bool:
        if self.deny_all:
            return False
        return self.venue_ids is None or venue_id in self.venue_ids

    def allows_ground(self, ground_id: Optional[uuid.UUID]) -> bool:
        if self.deny_all:
            return False
        return self.ground_ids is None or ground_id in self.ground_ids


def resolve_scope(requester: Requester) -> Scope:
    if isinstance(requester, SuperAdmin):
        return Scope(tier=Tier.SUPER_ADMIN)
    if isinstance(requester, Admin):
        return Scope(tier=Tier.ADMIN, city_id=requester.city_id)
    if isinstance(requester, SubAdmin):
        return Scope(
            tier=Tier.SUB_ADMIN,
            city_id=requester.city_id,
            venue_ids=requester.venue_ids,
            ground_ids=requester.ground_ids or None,
        )
    return Scope(tier=None, deny_all=True)


def scope_conditions(
    scope: Scope,
    *,
    city_column: Optional[ColumnElement] = None,
    venue_column: Optional[ColumnElement] = None,
    ground_column: Optional[ColumnElement] = None,
) -> List[ColumnElement]:
    """
    WHERE clauses restricting an entity's rows to the scope.

    Example:
        conditions = scope_conditions(
            scope,
            city_column=SlotTime.city_id,
            venue_column=SlotTime.venue_id,
            ground_column=SlotTime.ground_id,
        )
        stmt = select(SlotTime).where(*conditions)
    """
    if scope.deny_all:
        return [false()]

    conditions: List[ColumnElement] = []
    if scope.city_id is not None and city_column is not None:
        conditions.append(city_column == scope.city_id)
    if scope.venue_ids is not None and venue_column is not None:
        conditions.append(venue_column.in_(sorted(scope.venue_ids, key=str)))
    if scope.ground_ids is not None and ground_column is not None:
        conditions.append(ground_column.in_(sorted(scope.ground_ids, key=str)))
    return conditions
