"""
Venue Admin — Menu Permissions
================================

What:  Decides whether a requester may perform an action on an admin menu.
How:   Evaluated in order, first match wins:
         1. SuperAdmin / Admin accounts (no role) → allowed everywhere
         2. SubAdmin accounts (no role) → allowed on the partner menus
         3. requesters holding a role → the role's permission row for the
            menu must grant the action
         4. otherwise → PermissionDeniedError (403)
"""

import enum
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from venue_admin.exceptions import PermissionDeniedError
from venue_admin.models.reference import Menu
from venue_admin.models.role import Role, RolePermission
from venue_admin.services.requester import Admin, Requester, SubAdmin, SuperAdmin

logger = logging.getLogger(__name__)


class Menus(str, enum.Enum):
    FAQ = "FAQ"
    BLOG = "BLOG"
    MENUS = "MENUS"
    ROLES = "ROLES"
    CITIES = "CITIES"
    ADMINS = "ADMINS"
    VENUES = "VENUES"
    EVENTS = "EVENTS"
    SPORTS = "SPORTS"
    GROUNDS = "GROUNDS"
    SUPPORT = "SUPPORT"
    MEMBERS = "MEMBERS"
    STUDENTS = "STUDENTS"
    FEEDBACK = "FEEDBACK"
    PAYMENTS = "PAYMENTS"
    HOMEPAGE = "HOMEPAGE"
    EXPENSES = "EXPENSES"
    INQUIRIES = "INQUIRIES"
    EMPLOYEES = "EMPLOYEES"
    CUSTOMERS = "CUSTOMERS"
    ACADEMIES = "ACADEMIES"
    SLOT_TIMES = "SLOT_TIMES"
    SUB_ADMINS = "SUB_ADMINS"
    MEMBERSHIPS = "MEMBERSHIPS"
    PROMO_CODES = "PROMO_CODES"
    RESERVATION = "RESERVATION"
    EVENT_REQUEST = "EVENT_REQUEST"
    SLOT_BOOKINGS = "SLOT_BOOKINGS"
    HAPPY_CUSTOMERS = "HAPPY_CUSTOMERS"
    PARTNER_REQUEST = "PARTNER_REQUEST"
    GROUND_REVIEW = "GROUND_REVIEW"


class Action(str, enum.Enum):
    ADD = "add"
    VIEW = "view"
    UPDATE = "update"
    REMOVE = "delete"


# Menus a sub-admin (venue partner) account manages without a role
PARTNER_MENUS = frozenset({
    Menus.GROUNDS,
    Menus.EMPLOYEES,
    Menus.ROLES,
    Menus.SLOT_TIMES,
    Menus.SLOT_BOOKINGS,
    Menus.EXPENSES,
    Menus.RESERVATION,
})


async def check_permission(
    db: AsyncSession,
    requester: Requester,
    menu: Menus,
    action: Action,
) -> None:
    """
    Raises PermissionDeniedError unless `requester` may `action` on `menu`.
    """
    if requester.role_id is None:
        if isinstance(requester, (SuperAdmin, Admin)):
            return
        if isinstance(requester, SubAdmin) and menu in PARTNER_MENUS:
            return
        logger.info("Permission denied: %s has no role for %s", type(requester).__name__, menu.value)
        raise PermissionDeniedError()

    permission = await db.scalar(
        select(RolePermission)
        .join(Role, Role.id == RolePermission.role_id)
        .join(Menu, Menu.id == RolePermission.menu_id)
        .where(
            Role.id == requester.role_id,
            Role.is_active.is_(True),
            Role.soft_delete.is_(False),
            Menu.name == menu.value,
        )
    )
    if permission is None or not getattr(permission, action.value):
        logger.info(
            "Permission denied: role %s lacks %s on %s",
            requester.role_id,
            action.value,
            menu.value,
        )
        raise PermissionDeniedError()
