"""
Venue Admin — Shared FastAPI Dependencies
===========================================

What:  Bearer-token authentication and per-menu permission guards.
How:   `get_requester` verifies the JWT issued by the login service, refuses
       blacklisted tokens and resolves the claims into a requester variant.
       `require(menu, action)` builds a dependency that additionally checks
       the menu permission and hands the requester to the route.

Usage:
    @router.post("/add-role")
    async def add_role(
        requester: Requester = Depends(require(Menus.ROLES, Action.ADD)),
        db: AsyncSession = Depends(get_db_session),
    ): ...
"""

import logging

import jwt
from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from venue_admin.config import settings
from venue_admin.database import get_db_session
from venue_admin.exceptions import PermissionDeniedError, ValidationError
from venue_admin.models.reference import BlacklistedToken
from venue_admin.services.permissions import Action, Menus, check_permission
from venue_admin.services.requester import Requester, requester_from_claims

logger = logging.getLogger(__name__)


# ── Authentication ────────────────────────────────────────────────────────

async def get_requester(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> Requester:
    """Dependency: the authenticated requester, or 406/403 on a bad token."""
    header = request.headers.get("Authorization")
    if not header:
        raise ValidationError(message="Authorization token not present in the header")

    parts = header.split(" ")
    if len(parts) != 2:
        raise ValidationError(message="Invalid authorization token")
    token = parts[1]

    blacklisted = await db.scalar(
        select(BlacklistedToken.id).where(BlacklistedToken.token == token)
    )
    if blacklisted is not None:
        raise PermissionDeniedError(message="Token blacklisted, please login again")

    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.InvalidTokenError as e:
        logger.info("Rejected bearer token: %s", str(e))
        raise ValidationError(message=str(e))

    return requester_from_claims(claims)


# ── Authorization ─────────────────────────────────────────────────────────

def require(menu: Menus, action: Action):
    """Dependency factory: authenticated requester allowed to `action` on `menu`."""

    async def dependency(
        requester: Requester = Depends(get_requester),
        db: AsyncSession = Depends(get_db_session),
    ) -> Requester:
        await check_permission(db, requester, menu, action)
        return requester

    return dependency
