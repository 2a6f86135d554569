"""
MedWell Backend — Reminder Service
====================================

What:  List and create reminders.
How:   `reminders` collection; listing uses the (userId, dueDate) index and
       sorts ascending by dueDate.
"""

import logging
from typing import Optional

from pymongo import ASCENDING
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from medwell.database import REMINDERS, serialize_document, utcnow
from medwell.results import Err, Ok, Result
from medwell.schemas.common import missing_fields
from medwell.schemas.reminder import REQUIRED_REMINDER_FIELDS, ReminderCreate

logger = logging.getLogger(__name__)


class ReminderService:

    async def list_reminders(self, db: AsyncDatabase, user_id: Optional[str]) -> Result[list]:
        if not user_id:
            return Err.invalid("userId is required")

        try:
            cursor = db[REMINDERS].find({"userId": user_id}).sort("dueDate", ASCENDING)
            reminders = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error("Database error listing reminders for %s: %s", user_id, str(e))
            return Err.from_exception("Server error", e)

        return Ok(serialize_document(reminders))

    async def create_reminder(self, db: AsyncDatabase, payload: ReminderCreate) -> Result[dict]:
        if missing_fields(payload.model_dump(), REQUIRED_REMINDER_FIELDS):
            return Err.invalid("userId, title, dueDate required")

        now = utcnow()
        reminder = {
            "userId": payload.userId,
            "title": payload.title,
            "dueDate": payload.dueDate,
            "description": payload.description,
            "createdAt": now,
            "updatedAt": now,
        }

        try:
            result = await db[REMINDERS].insert_one(reminder)
        except PyMongoError as e:
            logger.error("Database error creating reminder for %s: %s", payload.userId, str(e))
            return Err.from_exception("Server error", e)

        reminder["_id"] = result.inserted_id
        logger.info("Reminder %s created for userId=%s", result.inserted_id, payload.userId)
        return Ok(serialize_document(reminder), status_code=201)


reminder_service = ReminderService()
