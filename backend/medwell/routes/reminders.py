"""
MedWell Backend — Reminder Routes
===================================

GET  /api/reminders?userId=   list, ascending dueDate
POST /api/reminders           create (201)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pymongo.asynchronous.database import AsyncDatabase

from medwell.database import get_database
from medwell.results import render
from medwell.schemas.common import ErrorResponse
from medwell.schemas.reminder import ReminderCreate
from medwell.services.reminder_service import reminder_service

router = APIRouter(prefix="/api", tags=["Reminders"])

ERROR_RESPONSES = {
    400: {"description": "Missing required field", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


@router.get("/reminders", responses=ERROR_RESPONSES, summary="List a user's reminders")
async def list_reminders(
    userId: Optional[str] = Query(default=None, description="User identifier"),
    db: AsyncDatabase = Depends(get_database),
) -> JSONResponse:
    return render(await reminder_service.list_reminders(db, userId))


@router.post(
    "/reminders",
    status_code=201,
    responses=ERROR_RESPONSES,
    summary="Create a reminder",
)
async def create_reminder(
    payload: ReminderCreate,
    db: AsyncDatabase = Depends(get_database),
) -> JSONResponse:
    return render(await reminder_service.create_reminder(db, payload))
