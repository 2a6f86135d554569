"""
MedWell Backend — Document Routes
===================================

POST   /api/documents                 multipart upload (userId, title?, file)
GET    /api/documents?userId=         list, newest first
DELETE /api/documents/{document_id}   remove record and file

Stored files are downloadable from the /uploads static mount using the
record's `url`.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import JSONResponse
from pymongo.asynchronous.database import AsyncDatabase

from medwell.database import get_database
from medwell.results import render
from medwell.schemas.common import ErrorResponse, MessageResponse
from medwell.services.document_service import DocumentService, get_document_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["Documents"])

ERROR_RESPONSES = {
    400: {"description": "Missing userId/file, unsupported type or size", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


@router.post("", status_code=201, responses=ERROR_RESPONSES, summary="Upload a medical document")
async def upload_document(
    userId: Optional[str] = Form(default=None),
    title: Optional[str] = Form(default=None),
    file: Optional[UploadFile] = File(default=None, description="PDF, PNG, JPG or JPEG"),
    db: AsyncDatabase = Depends(get_database),
    documents: DocumentService = Depends(get_document_service),
) -> JSONResponse:
    if file is None:
        return render(await documents.upload_document(db, userId, None, b""))

    try:
        content = await file.read()
        logger.info(
            "Received document upload: filename=%s, size=%d bytes",
            file.filename or "unknown",
            len(content),
        )
        result = await documents.upload_document(
            db,
            user_id=userId,
            filename=file.filename,
            content=content,
            title=title,
            content_length=file.size,
        )
    finally:
        await file.close()

    return render(result)


@router.get("", responses=ERROR_RESPONSES, summary="List a user's documents")
async def list_documents(
    userId: Optional[str] = Query(default=None, description="User identifier"),
    db: AsyncDatabase = Depends(get_database),
    documents: DocumentService = Depends(get_document_service),
) -> JSONResponse:
    return render(await documents.list_documents(db, userId))


@router.delete(
    "/{document_id}",
    responses={
        200: {"model": MessageResponse},
        **ERROR_RESPONSES,
        404: {"description": "Document not found", "model": ErrorResponse},
    },
    summary="Delete a document",
)
async def delete_document(
    document_id: str,
    db: AsyncDatabase = Depends(get_database),
    documents: DocumentService = Depends(get_document_service),
) -> JSONResponse:
    return render(await documents.delete_document(db, document_id))
