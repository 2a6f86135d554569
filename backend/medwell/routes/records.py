"""
MedWell Backend — Health Record Routes
========================================

One router per RecordResource (see services/record_service.py):

    GET    <prefix>?userId=      list
    POST   <prefix>              create (201)
    GET    <prefix>/{record_id}  fetch
    PUT    <prefix>/{record_id}  partial update
    DELETE <prefix>/{record_id}  delete
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse
from pymongo.asynchronous.database import AsyncDatabase

from medwell.database import get_database
from medwell.results import render
from medwell.schemas.common import ErrorResponse, MessageResponse
from medwell.services.record_service import RESOURCES, RecordResource, record_service

ERROR_RESPONSES = {
    400: {"description": "Missing field or malformed id", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}
NOT_FOUND = {404: {"description": "Record not found", "model": ErrorResponse}}


def build_router(resource: RecordResource) -> APIRouter:
    router = APIRouter(prefix=resource.prefix, tags=[resource.tag])
    label = resource.label.lower()

    @router.get("", responses=ERROR_RESPONSES, summary=f"List {label} records for a user")
    async def list_records(
        userId: Optional[str] = Query(default=None, description="User identifier"),
        db: AsyncDatabase = Depends(get_database),
    ) -> JSONResponse:
        return render(await record_service.list_records(db, resource, userId))

    @router.post(
        "",
        status_code=201,
        responses=ERROR_RESPONSES,
        summary=f"Create a {label} record",
        description=f"Required fields: {', '.join(resource.required)}. Extra fields are stored as sent.",
    )
    async def create_record(
        body: Optional[Dict[str, Any]] = Body(default=None),
        db: AsyncDatabase = Depends(get_database),
    ) -> JSONResponse:
        return render(await record_service.create_record(db, resource, body or {}))

    @router.get("/{record_id}", responses={**ERROR_RESPONSES, **NOT_FOUND}, summary=f"Fetch a {label} record")
    async def get_record(record_id: str, db: AsyncDatabase = Depends(get_database)) -> JSONResponse:
        return render(await record_service.get_record(db, resource, record_id))

    @router.put("/{record_id}", responses={**ERROR_RESPONSES, **NOT_FOUND}, summary=f"Update a {label} record")
    async def update_record(
        record_id: str,
        body: Optional[Dict[str, Any]] = Body(default=None),
        db: AsyncDatabase = Depends(get_database),
    ) -> JSONResponse:
        return render(await record_service.update_record(db, resource, record_id, body or {}))

    @router.delete(
        "/{record_id}",
        responses={200: {"model": MessageResponse}, **ERROR_RESPONSES, **NOT_FOUND},
        summary=f"Delete a {label} record",
    )
    async def delete_record(record_id: str, db: AsyncDatabase = Depends(get_database)) -> JSONResponse:
        return render(await record_service.delete_record(db, resource, record_id))

    return router


routers: List[APIRouter] = [build_router(resource) for resource in RESOURCES]
