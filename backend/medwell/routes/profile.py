"""
MedWell Backend — User Profile Routes
=======================================

GET  /api/user/profile?userId=   fetch
POST /api/user/profile           create-or-replace (upsert on userId)
PUT  /api/user/profile?userId=   partial update
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse
from pymongo.asynchronous.database import AsyncDatabase

from medwell.database import get_database
from medwell.results import render
from medwell.schemas.common import ErrorResponse
from medwell.schemas.profile import ProfileUpsert
from medwell.services.profile_service import profile_service

router = APIRouter(prefix="/api/user", tags=["Profile"])

ERROR_RESPONSES = {
    400: {"description": "userId (or other required field) missing", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


@router.get(
    "/profile",
    responses={**ERROR_RESPONSES, 404: {"description": "User not found", "model": ErrorResponse}},
    summary="Fetch a user profile",
)
async def get_profile(
    userId: Optional[str] = Query(default=None, description="User identifier"),
    db: AsyncDatabase = Depends(get_database),
) -> JSONResponse:
    return render(await profile_service.get_profile(db, userId))


@router.post(
    "/profile",
    responses=ERROR_RESPONSES,
    summary="Create or replace a user profile",
    description=(
        "Upserts the profile keyed on userId. name and email are required; any "
        "additional attributes in the body are stored on the profile."
    ),
)
async def upsert_profile(
    payload: ProfileUpsert,
    db: AsyncDatabase = Depends(get_database),
) -> JSONResponse:
    return render(await profile_service.upsert_profile(db, payload))


@router.put(
    "/profile",
    responses={**ERROR_RESPONSES, 404: {"description": "User not found", "model": ErrorResponse}},
    summary="Partially update a user profile",
)
async def update_profile(
    userId: Optional[str] = Query(default=None, description="User identifier"),
    fields: Optional[Dict[str, Any]] = Body(default=None),
    db: AsyncDatabase = Depends(get_database),
) -> JSONResponse:
    return render(await profile_service.update_profile(db, userId, fields or {}))
