"""
Venue Admin — Role Service Tests
==================================

What:  RoleService against an in-memory database.

What we test:
    ✅ Creation upper-cases the name and records the creator's tier
    ✅ Tier requirements (city for Admin, venue for SubAdmin)
    ✅ Duplicate live names conflict; removed ones do not
    ✅ Listings only show roles of the requester's tier and scope
    ✅ Updates replace permissions; out-of-scope roles are not found
"""

import uuid

import pytest
from sqlalchemy import select

from venue_admin.exceptions import ConflictError, NotFoundError, ValidationError
from venue_admin.models.role import Role
from venue_admin.schemas.role import AddRoleRequest, PermissionIn, UpdateRoleRequest
from venue_admin.services.permissions import Menus
from venue_admin.services.requester import Admin, SubAdmin, SuperAdmin
from venue_admin.services.role_service import RoleService


def _permission(menu, **flags) -> PermissionIn:
    values = {"add": False, "view": False, "update": False, "delete": False}
    values.update(flags)
    return PermissionIn(menu=menu.id, **values)


class TestAddRole:

    def setup_method(self):
        self.service = RoleService()

    @pytest.mark.asyncio
    async def test_admin_creates_role(self, db_session, seed):
        admin = Admin(city_id=seed.north.id)
        data = AddRoleRequest(
            name="manager",
            city=seed.north.id,
            permissions=[_permission(seed.menus[Menus.VENUES], view=True)],
        )

        created = await self.service.add_role(db_session, admin, data)

        role = await db_session.get(Role, created.id)
        assert role.name == "MANAGER"
        assert role.added_by == "AD"
        assert role.city_id == seed.north.id

    @pytest.mark.asyncio
    async def test_admin_needs_city(self, db_session, seed):
        data = AddRoleRequest(name="manager", permissions=[])
        with pytest.raises(ValidationError) as exc_info:
            await self.service.add_role(db_session, Admin(city_id=seed.north.id), data)
        assert exc_info.value.key == "city"

    @pytest.mark.asyncio
    async def test_sub_admin_needs_venue(self, db_session, seed):
        data = AddRoleRequest(name="cashier", city=seed.north.id, permissions=[])
        with pytest.raises(ValidationError, match="Venue is required"):
            await self.service.add_role(db_session, SubAdmin(city_id=seed.north.id), data)

    @pytest.mark.asyncio
    async def test_venue_without_city(self, db_session, seed):
        data = AddRoleRequest(name="cashier", venue=seed.arena.id, permissions=[])
        with pytest.raises(ValidationError, match="City is required"):
            await self.service.add_role(db_session, SuperAdmin(), data)

    @pytest.mark.asyncio
    async def test_inactive_city(self, db_session, seed):
        data = AddRoleRequest(name="manager", city=seed.closed_city.id, permissions=[])
        with pytest.raises(ValidationError, match="City does not exist or is disabled"):
            await self.service.add_role(db_session, SuperAdmin(), data)

    @pytest.mark.asyncio
    async def test_unknown_menu(self, db_session, seed):
        data = AddRoleRequest(
            name="manager",
            permissions=[PermissionIn(menu=uuid.uuid4(), add=True, view=True, update=True, delete=True)],
        )
        with pytest.raises(ValidationError, match="Menu does not exist"):
            await self.service.add_role(db_session, SuperAdmin(), data)

    @pytest.mark.asyncio
    async def test_duplicate_name_conflicts_case_insensitively(self, db_session, seed):
        admin = Admin(city_id=seed.north.id)
        await self.service.add_role(
            db_session, admin, AddRoleRequest(name="Manager", city=seed.north.id, permissions=[])
        )
        with pytest.raises(ConflictError, match="Role already exists"):
            await self.service.add_role(
                db_session, admin, AddRoleRequest(name="MANAGER", city=seed.north.id, permissions=[])
            )

    @pytest.mark.asyncio
    async def test_same_name_in_other_city_is_allowed(self, db_session, seed):
        await self.service.add_role(
            db_session, SuperAdmin(), AddRoleRequest(name="manager", city=seed.north.id, permissions=[])
        )
        await self.service.add_role(
            db_session, SuperAdmin(), AddRoleRequest(name="manager", city=seed.south.id, permissions=[])
        )

    @pytest.mark.asyncio
    async def test_removed_role_frees_the_name(self, db_session, seed):
        data = AddRoleRequest(name="manager", city=seed.north.id, permissions=[])
        created = await self.service.add_role(db_session, SuperAdmin(), data)
        await self.service.remove_roles(db_session, SuperAdmin(), [created.id])

        await self.service.add_role(db_session, SuperAdmin(), data)


class TestListRoles:

    def setup_method(self):
        self.service = RoleService()

    async def _add(self, db, requester, name, city=None, venue=None):
        return await self.service.add_role(
            db, requester, AddRoleRequest(name=name, city=city, venue=venue, permissions=[])
        )

    @pytest.mark.asyncio
    async def test_tier_and_city_visibility(self, db_session, seed):
        north_admin = Admin(city_id=seed.north.id)
        south_admin = Admin(city_id=seed.south.id)
        await self._add(db_session, north_admin, "north role", city=seed.north.id)
        await self._add(db_session, south_admin, "south role", city=seed.south.id)
        await self._add(db_session, SuperAdmin(), "global role")

        north = await self.service.list_roles(db_session, north_admin)
        assert [r.name for r in north.roles] == ["NORTH ROLE"]
        assert north.count == 1

        everything = await self.service.list_roles(db_session, SuperAdmin())
        assert [r.name for r in everything.roles] == ["GLOBAL ROLE"]

    @pytest.mark.asyncio
    async def test_sub_admin_sees_assigned_venues_only(self, db_session, seed):
        sub_admin = SubAdmin(city_id=seed.north.id, venue_ids=frozenset({seed.arena.id}))
        dome_admin = SubAdmin(city_id=seed.north.id, venue_ids=frozenset({seed.dome.id}))
        await self._add(db_session, sub_admin, "arena crew", city=seed.north.id, venue=seed.arena.id)
        await self._add(db_session, dome_admin, "dome crew", city=seed.north.id, venue=seed.dome.id)

        result = await self.service.list_roles(db_session, sub_admin)
        assert [r.name for r in result.roles] == ["ARENA CREW"]
        assert result.roles[0].venue.name == "Arena Stadium"

    @pytest.mark.asyncio
    async def test_search_and_status_filters(self, db_session, seed):
        admin = Admin(city_id=seed.north.id)
        keep = await self._add(db_session, admin, "groundsman", city=seed.north.id)
        await self._add(db_session, admin, "cashier", city=seed.north.id)
        await self.service.update_role(
            db_session, admin, UpdateRoleRequest(id=keep.id, name="groundsman", city=seed.north.id, is_active=False)
        )

        found = await self.service.list_roles(db_session, admin, search="ground")
        assert [r.name for r in found.roles] == ["GROUNDSMAN"]

        active = await self.service.list_roles(db_session, admin, is_active=True)
        assert [r.name for r in active.roles] == ["CASHIER"]

    @pytest.mark.asyncio
    async def test_fetch_roles_returns_active_options(self, db_session, seed):
        admin = Admin(city_id=seed.north.id)
        await self._add(db_session, admin, "zeta", city=seed.north.id)
        await self._add(db_session, admin, "alpha", city=seed.north.id)

        options = await self.service.fetch_roles(db_session, admin)
        assert [r.name for r in options.roles] == ["ALPHA", "ZETA"]

    @pytest.mark.asyncio
    async def test_fetch_roles_sub_admin_needs_venue(self, db_session, seed):
        with pytest.raises(ValidationError, match="Venue is required"):
            await self.service.fetch_roles(db_session, SubAdmin(city_id=seed.north.id))


class TestUpdateRole:

    def setup_method(self):
        self.service = RoleService()

    @pytest.mark.asyncio
    async def test_permissions_are_replaced(self, db_session, seed):
        created = await self.service.add_role(
            db_session,
            SuperAdmin(),
            AddRoleRequest(
                name="auditor",
                permissions=[_permission(seed.menus[Menus.EXPENSES], view=True)],
            ),
        )

        await self.service.update_role(
            db_session,
            SuperAdmin(),
            UpdateRoleRequest(
                id=created.id,
                name="auditor",
                permissions=[_permission(seed.menus[Menus.VENUES], view=True, update=True)],
            ),
        )

        listed = await self.service.list_roles(db_session, SuperAdmin(), role_id=created.id)
        permissions = listed.roles[0].permissions
        assert len(permissions) == 1
        assert permissions[0].menu.name == "VENUES"
        assert permissions[0].update is True

    @pytest.mark.asyncio
    async def test_admin_moves_role_to_another_city(self, db_session, seed):
        created = await self.service.add_role(
            db_session, Admin(city_id=seed.north.id),
            AddRoleRequest(name="coach", city=seed.north.id, permissions=[]),
        )
        await self.service.update_role(
            db_session, Admin(city_id=seed.north.id),
            UpdateRoleRequest(id=created.id, name="coach", city=seed.south.id),
        )

        city_id = await db_session.scalar(select(Role.city_id).where(Role.id == created.id))
        assert city_id == seed.south.id

    @pytest.mark.asyncio
    async def test_rename_onto_existing_name_conflicts(self, db_session, seed):
        first = await self.service.add_role(
            db_session, SuperAdmin(), AddRoleRequest(name="first", permissions=[])
        )
        await self.service.add_role(db_session, SuperAdmin(), AddRoleRequest(name="second", permissions=[]))

        with pytest.raises(ConflictError):
            await self.service.update_role(
                db_session, SuperAdmin(), UpdateRoleRequest(id=first.id, name="Second")
            )

    @pytest.mark.asyncio
    async def test_out_of_scope_role_is_not_found(self, db_session, seed):
        created = await self.service.add_role(
            db_session, Admin(city_id=seed.south.id),
            AddRoleRequest(name="coach", city=seed.south.id, permissions=[]),
        )
        with pytest.raises(NotFoundError):
            await self.service.update_role(
                db_session, Admin(city_id=seed.north.id),
                UpdateRoleRequest(id=created.id, name="coach", city=seed.north.id),
            )

    @pytest.mark.asyncio
    async def test_remove_skips_out_of_scope_roles(self, db_session, seed):
        south = await self.service.add_role(
            db_session, Admin(city_id=seed.south.id),
            AddRoleRequest(name="coach", city=seed.south.id, permissions=[]),
        )
        removed = await self.service.remove_roles(db_session, Admin(city_id=seed.north.id), [south.id])
        assert removed == 0

        removed = await self.service.remove_roles(db_session, Admin(city_id=seed.south.id), [south.id])
        assert removed == 1
        flag = await db_session.scalar(select(Role.soft_delete).where(Role.id == south.id))
        assert flag is True
