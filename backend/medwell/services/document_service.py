"""
MedWell Backend — Document Service
====================================

What:  Upload, list and delete a user's medical documents.
How:   FileService writes the bytes; the `documents` collection keeps one
       record per file with the public URL under /uploads.

Upload flow:
    validate userId → validate & store file → insert record
    If the insert fails the stored file is removed again.
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import Request
from pymongo import DESCENDING
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from medwell.database import DOCUMENTS, parse_object_id, serialize_document, utcnow
from medwell.exceptions import FileStorageError, ValidationError
from medwell.results import Err, Ok, Result
from medwell.services.file_service import CONTENT_TYPES, FileService

logger = logging.getLogger(__name__)

UPLOADS_URL_PREFIX = "/uploads"


class DocumentService:

    def __init__(self, files: FileService):
        self.files = files

    async def upload_document(
        self,
        db: AsyncDatabase,
        user_id: Optional[str],
        filename: Optional[str],
        content: bytes,
        title: Optional[str] = None,
        content_length: Optional[int] = None,
    ) -> Result[dict]:
        if not user_id or not filename:
            return Err.invalid("userId and file required")

        try:
            absolute_path, relative_path = await self.files.validate_and_store(
                filename=filename,
                content=content,
                user_id=user_id,
                content_length=content_length,
            )
        except ValidationError as e:
            return Err.invalid(e.message)
        except FileStorageError as e:
            return Err.from_exception("Server error", e)

        ext = Path(relative_path).suffix
        now = utcnow()
        document = {
            "userId": user_id,
            "title": title or Path(filename).stem,
            "originalName": filename,
            "filename": relative_path,
            "contentType": CONTENT_TYPES[ext],
            "size": len(content),
            "url": f"{UPLOADS_URL_PREFIX}/{relative_path}",
            "createdAt": now,
            "updatedAt": now,
        }

        try:
            result = await db[DOCUMENTS].insert_one(document)
        except PyMongoError as e:
            logger.error("Database error saving document for %s: %s", user_id, str(e))
            await self.files.cleanup_file(absolute_path)
            return Err.from_exception("Server error", e)

        document["_id"] = result.inserted_id
        return Ok(serialize_document(document), status_code=201)

    async def list_documents(self, db: AsyncDatabase, user_id: Optional[str]) -> Result[list]:
        if not user_id:
            return Err.invalid("userId is required")

        try:
            cursor = db[DOCUMENTS].find({"userId": user_id}).sort("createdAt", DESCENDING)
            documents = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error("Database error listing documents for %s: %s", user_id, str(e))
            return Err.from_exception("Server error", e)

        return Ok(serialize_document(documents))

    async def delete_document(self, db: AsyncDatabase, document_id: str) -> Result[dict]:
        oid = parse_object_id(document_id)
        if oid is None:
            return Err.invalid("Invalid document id")

        try:
            document = await db[DOCUMENTS].find_one_and_delete({"_id": oid})
        except PyMongoError as e:
            logger.error("Database error deleting document %s: %s", document_id, str(e))
            return Err.from_exception("Server error", e)

        if document is None:
            return Err.not_found("Document not found")

        try:
            await self.files.cleanup_file(str(self.files.resolve(document["filename"])))
        except FileStorageError as e:
            logger.warning("Document %s had an unexpected file path: %s", document_id, e.message)

        return Ok({"message": "Document deleted", "id": document_id})


def get_document_service(request: Request) -> DocumentService:
    """FastAPI dependency returning the service built by create_app()."""
    return request.app.state.document_service
