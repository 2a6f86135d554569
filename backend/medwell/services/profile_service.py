"""
MedWell Backend — Profile Service
===================================

What:  Fetch, create-or-replace and partially update user profiles.
How:   One `users` collection call per operation, keyed on the externally
       supplied `userId` (unique index).

Write semantics:
    upsert_profile  find_one_and_update(
                        {userId},
                        {$set: name, email, extras, updatedAt,
                         $setOnInsert: defaults not present in $set},
                        upsert=True, return AFTER)
    update_profile  find_one_and_update({userId}, {$set: body + updatedAt}),
                    no upsert; `_id` and `userId` in the body are ignored
"""

import logging
from typing import Any, Dict, Optional

from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from medwell.database import USERS, invalid_field_names, serialize_document, utcnow
from medwell.results import Err, Ok, Result
from medwell.schemas.common import missing_fields
from medwell.schemas.profile import REQUIRED_PROFILE_FIELDS, ProfileUpsert

logger = logging.getLogger(__name__)

# Written only when the profile is first created
PROFILE_DEFAULTS: Dict[str, Any] = {
    "conditions": [],
    "allergies": [],
    "medications": [],
}

PROTECTED_FIELDS = ("_id", "userId", "createdAt")


class ProfileService:
    """
    Business logic for user profiles.

    Error mapping:
        missing userId / required names      → invalid_input (400)
        no profile for userId                → not_found (404)
        PyMongoError                         → server_error (500)
    """

    async def get_profile(self, db: AsyncDatabase, user_id: Optional[str]) -> Result[dict]:
        if not user_id:
            return Err.invalid("userId is required")

        try:
            user = await db[USERS].find_one({"userId": user_id})
        except PyMongoError as e:
            logger.error("Database error fetching profile %s: %s", user_id, str(e))
            return Err.from_exception("Server error", e)

        if user is None:
            return Err.not_found("User not found")
        return Ok(serialize_document(user))

    async def upsert_profile(self, db: AsyncDatabase, payload: ProfileUpsert) -> Result[dict]:
        if missing_fields(payload.named_fields(), REQUIRED_PROFILE_FIELDS):
            return Err.invalid("userId, name, email required")

        attributes = {
            key: value for key, value in payload.attributes.items() if key not in PROTECTED_FIELDS
        }
        bad_names = invalid_field_names(attributes)
        if bad_names:
            return Err.invalid(f"Invalid field names: {', '.join(bad_names)}")

        now = utcnow()
        to_set = {"name": payload.name, "email": payload.email, **attributes, "updatedAt": now}
        on_insert = {key: value for key, value in PROFILE_DEFAULTS.items() if key not in to_set}
        on_insert["createdAt"] = now

        try:
            user = await db[USERS].find_one_and_update(
                {"userId": payload.userId},
                {"$set": to_set, "$setOnInsert": on_insert},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error("Database error upserting profile %s: %s", payload.userId, str(e))
            return Err.from_exception("Server error", e)

        logger.info("Profile saved for userId=%s", payload.userId)
        return Ok(serialize_document(user))

    async def update_profile(
        self, db: AsyncDatabase, user_id: Optional[str], fields: Dict[str, Any]
    ) -> Result[dict]:
        if not user_id:
            return Err.invalid("userId is required")

        changes = {key: value for key, value in fields.items() if key not in PROTECTED_FIELDS}
        bad_names = invalid_field_names(changes)
        if bad_names:
            return Err.invalid(f"Invalid field names: {', '.join(bad_names)}")
        changes["updatedAt"] = utcnow()

        try:
            user = await db[USERS].find_one_and_update(
                {"userId": user_id},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error("Database error updating profile %s: %s", user_id, str(e))
            return Err.from_exception("Server error", e)

        if user is None:
            return Err.not_found("User not found")
        return Ok(serialize_document(user))


profile_service = ProfileService()
