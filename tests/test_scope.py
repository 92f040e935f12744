"""
Venue Admin — Scope Tests
===========================

What:  resolve_scope per requester variant and the WHERE clauses it
       produces, compiled to SQL text.
"""

import uuid

from sqlalchemy import select
from sqlalchemy.sql.elements import False_

from venue_admin.models.slot_time import SlotTime
from venue_admin.services.requester import Admin, Staff, SubAdmin, SuperAdmin, Tier
from venue_admin.services.scope import Scope, resolve_scope, scope_conditions

CITY = uuid.uuid4()
VENUE = uuid.uuid4()
GROUND = uuid.uuid4()


def _sql(scope: Scope) -> str:
    conditions = scope_conditions(
        scope,
        city_column=SlotTime.city_id,
        venue_column=SlotTime.venue_id,
        ground_column=SlotTime.ground_id,
    )
    return str(select(SlotTime.id).where(*conditions))


class TestResolveScope:

    def test_super_admin_is_unrestricted(self):
        scope = resolve_scope(SuperAdmin())
        assert scope.tier is Tier.SUPER_ADMIN
        assert scope.unrestricted
        assert scope.allows_city(CITY) and scope.allows_venue(VENUE)

    def test_admin_is_limited_to_city(self):
        scope = resolve_scope(Admin(city_id=CITY))
        assert scope.city_id == CITY
        assert scope.venue_ids is None
        assert scope.allows_city(CITY)
        assert not scope.allows_city(uuid.uuid4())
        assert scope.allows_venue(uuid.uuid4())

    def test_admin_without_city_claim_is_unrestricted(self):
        """An admin token carrying no city acts platform-wide."""
        scope = resolve_scope(Admin())
        assert scope.unrestricted
        assert scope_conditions(scope, city_column=SlotTime.city_id) == []

    def test_sub_admin_without_venues_allows_no_venue(self):
        scope = resolve_scope(SubAdmin(city_id=CITY))
        assert scope.venue_ids == frozenset()
        assert not scope.allows_venue(VENUE)

    def test_sub_admin_is_limited_to_city_and_venues(self):
        scope = resolve_scope(
            SubAdmin(city_id=CITY, venue_ids=frozenset({VENUE}), ground_ids=frozenset({GROUND}))
        )
        assert scope.allows_venue(VENUE)
        assert not scope.allows_venue(uuid.uuid4())
        assert scope.allows_ground(GROUND)
        assert not scope.allows_ground(uuid.uuid4())

    def test_sub_admin_without_grounds_has_no_ground_restriction(self):
        scope = resolve_scope(SubAdmin(city_id=CITY, venue_ids=frozenset({VENUE})))
        assert scope.ground_ids is None
        assert scope.allows_ground(uuid.uuid4())

    def test_staff_sees_nothing(self):
        scope = resolve_scope(Staff(city_id=CITY))
        assert scope.deny_all
        assert not scope.allows_city(CITY)


class TestScopeConditions:

    def test_unrestricted_scope_adds_no_clause(self):
        assert scope_conditions(Scope(tier=Tier.SUPER_ADMIN), city_column=SlotTime.city_id) == []

    def test_admin_filters_city_only(self):
        sql = _sql(resolve_scope(Admin(city_id=CITY)))
        assert "slot_times.city_id = " in sql
        assert "venue_id IN" not in sql

    def test_sub_admin_filters_all_dimensions(self):
        sql = _sql(resolve_scope(
            SubAdmin(city_id=CITY, venue_ids=frozenset({VENUE}), ground_ids=frozenset({GROUND}))
        ))
        assert "slot_times.city_id = " in sql
        assert "slot_times.venue_id IN" in sql
        assert "slot_times.ground_id IN" in sql

    def test_missing_column_is_not_filtered(self):
        scope = resolve_scope(SubAdmin(city_id=CITY, venue_ids=frozenset({VENUE})))
        conditions = scope_conditions(scope, city_column=SlotTime.city_id)
        assert len(conditions) == 1

    def test_deny_all_yields_false(self):
        conditions = scope_conditions(resolve_scope(Staff()), city_column=SlotTime.city_id)
        assert len(conditions) == 1
        assert isinstance(conditions[0], False_)
