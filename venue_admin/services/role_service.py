"""
Venue Admin — Role Service
============================

What:  Create, list, update and soft-delete employee roles, plus the
       lightweight `{id, name}` role list used by pickers.
How:   Stateless service; every method receives the request's AsyncSession
       and the resolved requester. Visibility is the requester's scope
       (city / venue) narrowed to roles created by the same tier.

Tier rules:
    Admin-tier creators must pass a city, SubAdmin-tier creators a venue.
    A venue is only accepted together with its city.
    `added_by` on the new role is the creator's tier tag.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from venue_admin.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from venue_admin.models.role import Role, RolePermission
from venue_admin.schemas.common import CreatedData, Reference
from venue_admin.schemas.role import (
    AddRoleRequest,
    PermissionIn,
    RoleListData,
    RoleOptionsData,
    RoleOut,
    UpdateRoleRequest,
)
from venue_admin.services import references
from venue_admin.services.filters import compact, paginate, search_condition
from venue_admin.services.requester import Requester, Tier, city_of
from venue_admin.services.scope import Scope, resolve_scope, scope_conditions

logger = logging.getLogger(__name__)


def _visibility(scope: Scope) -> List[ColumnElement]:
    conditions = scope_conditions(
        scope,
        city_column=Role.city_id,
        venue_column=Role.venue_id,
    )
    if scope.tier is not None:
        conditions.append(Role.added_by == scope.tier.value)
    return conditions


def _permission_rows(permissions: List[PermissionIn]) -> List[RolePermission]:
    return [
        RolePermission(
            menu_id=p.menu,
            add=p.add,
            view=p.view,
            update=p.update,
            delete=p.delete,
        )
        for p in permissions
    ]


class RoleService:
    """Business logic for the role endpoints."""

    async def _check_tier_requirements(
        self,
        requester: Requester,
        city_id: Optional[uuid.UUID],
        venue_id: Optional[uuid.UUID],
    ) -> None:
        if requester.tier is Tier.ADMIN and city_id is None:
            raise ValidationError(message="City is required", field="city")
        if requester.tier is Tier.SUB_ADMIN and venue_id is None:
            raise ValidationError(message="Venue is required", field="venue")

    async def _ensure_unique(
        self,
        db: AsyncSession,
        name: str,
        city_id: Optional[uuid.UUID],
        venue_id: Optional[uuid.UUID],
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        conditions = [
            Role.name == name,
            Role.city_id.is_(None) if city_id is None else Role.city_id == city_id,
            Role.venue_id.is_(None) if venue_id is None else Role.venue_id == venue_id,
            Role.soft_delete.is_(False),
        ]
        if exclude_id is not None:
            conditions.append(Role.id != exclude_id)
        existing = await db.scalar(select(func.count(Role.id)).where(*conditions))
        if existing:
            raise ConflictError(message="Role already exists")

    async def add_role(
        self, db: AsyncSession, requester: Requester, data: AddRoleRequest
    ) -> CreatedData:
        """
        Create a role.

        Check order:
            1. tier requirements (city for Admin, venue for SubAdmin)
            2. city live, venue live
            3. venue given without city
            4. every permission menu exists
            5. no live role with the same upper-cased name, city and venue
        """
        await self._check_tier_requirements(requester, data.city, data.venue)
        if data.city is not None:
            await references.live_city(db, data.city)
        if data.venue is not None:
            await references.live_venue(db, data.venue)
        if data.venue is not None and data.city is None:
            raise ValidationError(message="City is required", field="city")
        await references.ensure_menus_exist(db, (p.menu for p in data.permissions))

        name = data.name.upper()
        await self._ensure_unique(db, name, data.city, data.venue)

        role = Role(
            name=name,
            city_id=data.city,
            venue_id=data.venue,
            added_by=requester.tier.value if requester.tier else None,
            permissions=_permission_rows(data.permissions),
        )
        try:
            db.add(role)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to create role '%s': %s", name, str(e))
            raise DatabaseError(context={"operation": "add_role"})

        logger.info("Role %s created (%s) by tier %s", role.id, name, role.added_by)
        return CreatedData(id=role.id)

    async def list_roles(
        self,
        db: AsyncSession,
        requester: Requester,
        *,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
        role_id: Optional[uuid.UUID] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> RoleListData:
        scope = resolve_scope(requester)
        conditions = [Role.soft_delete.is_(False), *_visibility(scope)]
        conditions += compact(
            search_condition(search, [Role.name]),
            Role.is_active.is_(is_active) if is_active is not None else None,
            Role.id == role_id if role_id is not None else None,
        )

        stmt = (
            select(Role)
            .where(*conditions)
            .order_by(Role.created_at)
            .execution_options(populate_existing=True)
        )
        roles = (await db.scalars(paginate(stmt, offset, limit))).all()
        count = await db.scalar(select(func.count(Role.id)).where(*conditions))

        return RoleListData(
            count=count or 0,
            roles=[RoleOut.model_validate(role) for role in roles],
        )

    async def update_role(
        self, db: AsyncSession, requester: Requester, data: UpdateRoleRequest
    ) -> None:
        """
        Update a role the requester can see.

        Admin-tier requesters may move the role to another city and
        SubAdmin-tier requesters to another venue; other tiers keep the
        role's city and venue.
        """
        await self._check_tier_requirements(requester, data.city, data.venue)

        scope = resolve_scope(requester)
        role = await db.scalar(
            select(Role).where(
                Role.id == data.id,
                Role.soft_delete.is_(False),
                *_visibility(scope),
            )
            .execution_options(populate_existing=True)
        )
        if role is None:
            raise NotFoundError(resource="role", resource_id=str(data.id))

        city_id, venue_id = role.city_id, role.venue_id
        if requester.tier is Tier.ADMIN:
            await references.live_city(db, data.city)
            city_id = data.city
        elif requester.tier is Tier.SUB_ADMIN:
            venue = await references.live_venue(db, data.venue)
            if city_id is not None and venue.city_id != city_id:
                raise ValidationError(
                    message="The city doesn't have the venue you selected", field="venue"
                )
            venue_id = data.venue

        name = data.name.upper()
        if (name, city_id, venue_id) != (role.name, role.city_id, role.venue_id):
            await self._ensure_unique(db, name, city_id, venue_id, exclude_id=role.id)

        role.name = name
        role.city_id = city_id
        role.venue_id = venue_id
        if data.is_active is not None:
            role.is_active = data.is_active
        if data.permissions is not None:
            await references.ensure_menus_exist(db, (p.menu for p in data.permissions))
            role.permissions = _permission_rows(data.permissions)

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to update role %s: %s", role.id, str(e))
            raise DatabaseError(context={"operation": "update_role"})
        logger.info("Role %s updated", role.id)

    async def remove_roles(
        self, db: AsyncSession, requester: Requester, role_ids: List[uuid.UUID]
    ) -> int:
        """Soft-delete the listed roles that fall inside the requester's scope."""
        scope = resolve_scope(requester)
        result = await db.execute(
            update(Role)
            .where(Role.id.in_(role_ids), Role.soft_delete.is_(False), *_visibility(scope))
            .values(soft_delete=True)
            .execution_options(synchronize_session=False)
        )
        logger.info("Soft-deleted %d of %d roles", result.rowcount, len(role_ids))
        return result.rowcount

    async def fetch_roles(
        self,
        db: AsyncSession,
        requester: Requester,
        *,
        venue_ids: Optional[List[uuid.UUID]] = None,
        search: Optional[str] = None,
        role_id: Optional[uuid.UUID] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> RoleOptionsData:
        """
        Active roles for selection lists.

        SA and AD requesters see roles of their own tier; everyone else sees
        SUB roles. SubAdmin-tier requesters must say which venues to list.
        """
        if requester.tier is Tier.SUB_ADMIN and not venue_ids:
            raise ValidationError(message="Venue is required", field="venue")

        if requester.tier in (Tier.SUPER_ADMIN, Tier.ADMIN):
            added_by = requester.tier.value
        else:
            added_by = Tier.SUB_ADMIN.value

        city_id = city_of(requester)
        conditions = [
            Role.soft_delete.is_(False),
            Role.is_active.is_(True),
            Role.added_by == added_by,
        ]
        conditions += compact(
            search_condition(search, [Role.name]),
            Role.city_id == city_id if city_id is not None else None,
            Role.venue_id.in_(venue_ids) if venue_ids else None,
            Role.id == role_id if role_id is not None else None,
        )

        stmt = select(Role.id, Role.name).where(*conditions).order_by(Role.name)
        rows = (await db.execute(paginate(stmt, offset, limit))).all()
        return RoleOptionsData(roles=[Reference(id=row.id, name=row.name) for row in rows])


# ── Singleton Instance ────────────────────────────────────────────────────
role_service = RoleService()
