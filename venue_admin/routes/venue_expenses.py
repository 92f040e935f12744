"""
Venue Admin — VenueExpense Route Handlers
===========================================

What:  Expense sheet administration and the PDF report download.
How:   Thin handlers over ExpenseService; the download renders the sheet
       with ReportService and streams the file back.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from venue_admin.database import get_db_session
from venue_admin.dependencies import require
from venue_admin.exceptions import ValidationError
from venue_admin.schemas.common import ApiResponse, CreatedData, Empty, ErrorResponse
from venue_admin.schemas.venue_expense import (
    AddVenueExpenseRequest,
    RemoveVenueExpensesRequest,
    UpdateVenueExpenseRequest,
    VenueExpenseListData,
)
from venue_admin.services.expense_service import expense_service
from venue_admin.services.filters import parse_uuid
from venue_admin.services.permissions import Action, Menus
from venue_admin.services.report_service import report_service
from venue_admin.services.requester import Requester

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Venue Expenses"])

ERRORS = {
    403: {"description": "Permission denied", "model": ErrorResponse},
    406: {"description": "Invalid input or token", "model": ErrorResponse},
}


@router.post(
    "/add-venue-expense",
    response_model=ApiResponse[CreatedData],
    responses={
        **ERRORS,
        409: {"description": "Expense already added for this month", "model": ErrorResponse},
    },
    summary="Create a monthly expense sheet",
)
async def add_venue_expense(
    body: AddVenueExpenseRequest,
    requester: Requester = Depends(require(Menus.EXPENSES, Action.ADD)),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[CreatedData]:
    created = await expense_service.add_expense(db, requester, body)
    return ApiResponse(message="Expense added successfully", data=created)


@router.get(
    "/get-venue-expenses",
    response_model=ApiResponse[VenueExpenseListData],
    responses=ERRORS,
    summary="List expense sheets with their totals",
)
async def get_venue_expenses(
    search: Optional[str] = Query(default=None),
    month: Optional[str] = Query(default=None),
    year: Optional[str] = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: Optional[int] = Query(default=None, ge=1),
    requester: Requester = Depends(require(Menus.EXPENSES, Action.VIEW)),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[VenueExpenseListData]:
    data = await expense_service.list_expenses(
        db,
        requester,
        search=search,
        month=month,
        year=year,
        offset=offset,
        limit=limit,
    )
    return ApiResponse(message="Expenses fetched successfully", data=data)


@router.post(
    "/update-venue-expense",
    response_model=ApiResponse[CreatedData],
    responses={
        **ERRORS,
        404: {"description": "Expense not found", "model": ErrorResponse},
        409: {"description": "Expense already added for this month", "model": ErrorResponse},
    },
    summary="Update an expense sheet",
)
async def update_venue_expense(
    body: UpdateVenueExpenseRequest,
    requester: Requester = Depends(require(Menus.EXPENSES, Action.UPDATE)),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[CreatedData]:
    await expense_service.update_expense(db, requester, body)
    return ApiResponse(message="Expense updated successfully", data=CreatedData(id=body.id))


@router.post(
    "/remove-venue-expenses",
    response_model=ApiResponse[Empty],
    responses=ERRORS,
    summary="Delete expense sheets",
)
async def remove_venue_expenses(
    body: RemoveVenueExpensesRequest,
    requester: Requester = Depends(require(Menus.EXPENSES, Action.REMOVE)),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[Empty]:
    await expense_service.remove_expenses(db, requester, body.expenseIds)
    return ApiResponse(message="Expenses removed successfully", data=Empty())


@router.get(
    "/download-expense-report",
    response_class=FileResponse,
    responses={
        200: {"content": {"application/pdf": {}}, "description": "The expense report PDF"},
        404: {"description": "Report not found", "model": ErrorResponse},
        500: {"description": "Could not download the file", "model": ErrorResponse},
    },
    summary="Render an expense sheet to PDF and download it",
)
async def download_expense_report(
    reportId: Optional[str] = Query(default=None),
    requester: Requester = Depends(require(Menus.EXPENSES, Action.VIEW)),
    db: AsyncSession = Depends(get_db_session),
) -> FileResponse:
    if not reportId:
        raise ValidationError(message='"reportId" is required', field="reportId")

    expense = await expense_service.get_for_report(db, requester, parse_uuid(reportId, "reportId"))
    path = await report_service.render_expense_report(expense)
    return FileResponse(
        path,
        media_type="application/pdf",
        filename="venue-expense-report.pdf",
    )
