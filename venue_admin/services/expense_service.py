"""
Venue Admin — VenueExpense Service
====================================

What:  Create, list, update and delete monthly venue expense sheets, and
       look up the sheet behind a report download.
How:   Same scoped-query approach as the other services, with city and
       venue as the scope dimensions. Unlike other entities, expense
       sheets are hard-deleted.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from venue_admin.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from venue_admin.models.venue_expense import VenueExpense
from venue_admin.schemas.common import CreatedData, Reference
from venue_admin.schemas.venue_expense import (
    AddVenueExpenseRequest,
    ExpenseItemOut,
    UpdateVenueExpenseRequest,
    VenueExpenseListData,
    VenueExpenseOut,
)
from venue_admin.services import references
from venue_admin.services.filters import compact, paginate, search_condition
from venue_admin.services.requester import Requester, city_of, venues_of
from venue_admin.services.scope import Scope, resolve_scope, scope_conditions

logger = logging.getLogger(__name__)

EXPENSE_EXISTS = "Expense already added for this month"


def _visibility(scope: Scope):
    return scope_conditions(
        scope,
        city_column=VenueExpense.city_id,
        venue_column=VenueExpense.venue_id,
    )


def _check_year(year: Optional[str]) -> None:
    if year is not None and int(year) > datetime.now(timezone.utc).year:
        raise ValidationError(message="Year should not be greater than current year", field="year")


def to_out(expense: VenueExpense) -> VenueExpenseOut:
    return VenueExpenseOut(
        id=expense.id,
        city=Reference.model_validate(expense.city),
        venue=Reference.model_validate(expense.venue),
        month=expense.month,
        year=expense.year,
        expenses=[ExpenseItemOut(**item) for item in expense.expenses],
        total_exp=expense.total,
    )


class ExpenseService:
    """Business logic for the venue expense endpoints."""

    async def _ensure_unique(
        self,
        db: AsyncSession,
        month: str,
        year: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        conditions = [VenueExpense.month == month, VenueExpense.year == year]
        if exclude_id is not None:
            conditions.append(VenueExpense.id != exclude_id)
        if await db.scalar(select(func.count(VenueExpense.id)).where(*conditions)):
            raise ConflictError(message=EXPENSE_EXISTS)

    async def _check_references(
        self,
        db: AsyncSession,
        requester: Requester,
        city_id: uuid.UUID,
        venue_id: uuid.UUID,
    ) -> None:
        """
        City and venue live → requester owns the city and venue (403) →
        venue belongs to the city (406).
        """
        await references.live_city(db, city_id)
        venue = await references.live_venue(db, venue_id)

        requester_city = city_of(requester)
        if requester_city is not None and requester_city != city_id:
            raise PermissionDeniedError()
        assigned = venues_of(requester)
        if assigned and venue_id not in assigned:
            raise PermissionDeniedError()

        if venue.city_id != city_id:
            raise ValidationError(
                message="The city doesn't have the venue you selected", field="venue"
            )

    async def _flush(self, db: AsyncSession, operation: str) -> None:
        try:
            await db.flush()
        except IntegrityError as e:
            logger.warning("Expense uniqueness violated during %s: %s", operation, str(e.orig))
            raise ConflictError(message=EXPENSE_EXISTS)
        except SQLAlchemyError as e:
            logger.error("Database error during %s: %s", operation, str(e))
            raise DatabaseError(context={"operation": operation})

    async def add_expense(
        self, db: AsyncSession, requester: Requester, data: AddVenueExpenseRequest
    ) -> CreatedData:
        _check_year(data.year)
        await self._ensure_unique(db, data.month, data.year)
        await self._check_references(db, requester, data.city, data.venue)

        expense = VenueExpense(
            city_id=data.city,
            venue_id=data.venue,
            month=data.month,
            year=data.year,
            expenses=[item.model_dump() for item in data.expenses],
        )
        db.add(expense)
        await self._flush(db, "add_expense")

        logger.info("Expense sheet %s created for %s %s", expense.id, data.month, data.year)
        return CreatedData(id=expense.id)

    async def list_expenses(
        self,
        db: AsyncSession,
        requester: Requester,
        *,
        search: Optional[str] = None,
        month: Optional[str] = None,
        year: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> VenueExpenseListData:
        scope = resolve_scope(requester)
        conditions = list(_visibility(scope))
        conditions += compact(
            search_condition(search, [VenueExpense.month, VenueExpense.year]),
            VenueExpense.month == month if month else None,
            VenueExpense.year == year if year else None,
        )

        stmt = (
            select(VenueExpense)
            .where(*conditions)
            .order_by(VenueExpense.created_at)
            .execution_options(populate_existing=True)
        )
        expenses = (await db.scalars(paginate(stmt, offset, limit))).all()
        count = await db.scalar(select(func.count(VenueExpense.id)).where(*conditions))

        return VenueExpenseListData(count=count or 0, outlays=[to_out(e) for e in expenses])

    async def update_expense(
        self, db: AsyncSession, requester: Requester, data: UpdateVenueExpenseRequest
    ) -> None:
        _check_year(data.year)

        scope = resolve_scope(requester)
        expense = await db.scalar(
            select(VenueExpense).where(VenueExpense.id == data.id, *_visibility(scope))
        )
        if expense is None:
            raise NotFoundError(resource="expense", resource_id=str(data.id))

        month = data.month or expense.month
        year = data.year or expense.year
        if (month, year) != (expense.month, expense.year):
            await self._ensure_unique(db, month, year, exclude_id=expense.id)
        await self._check_references(db, requester, data.city, data.venue)

        expense.city_id = data.city
        expense.venue_id = data.venue
        expense.month = month
        expense.year = year
        expense.expenses = [item.model_dump() for item in data.expenses]

        await self._flush(db, "update_expense")
        logger.info("Expense sheet %s updated", expense.id)

    async def remove_expenses(
        self, db: AsyncSession, requester: Requester, expense_ids: List[uuid.UUID]
    ) -> int:
        """Hard-delete the listed sheets inside the requester's scope."""
        scope = resolve_scope(requester)
        try:
            result = await db.execute(
                delete(VenueExpense)
                .where(VenueExpense.id.in_(expense_ids), *_visibility(scope))
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            logger.error("Failed to delete expense sheets: %s", str(e))
            raise DatabaseError(context={"operation": "remove_expenses"})
        logger.info("Deleted %d of %d expense sheets", result.rowcount, len(expense_ids))
        return result.rowcount

    async def get_for_report(
        self, db: AsyncSession, requester: Requester, report_id: uuid.UUID
    ) -> VenueExpense:
        scope = resolve_scope(requester)
        expense = await db.scalar(
            select(VenueExpense).where(VenueExpense.id == report_id, *_visibility(scope))
            .execution_options(populate_existing=True)
        )
        if expense is None:
            raise NotFoundError(
                resource="report", resource_id=str(report_id), message="Report not found"
            )
        return expense


# ── Singleton Instance ────────────────────────────────────────────────────
expense_service = ExpenseService()
