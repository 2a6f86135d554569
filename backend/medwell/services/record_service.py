"""
MedWell Backend — Health Record Service
=========================================

What:  Shared create/list/get/update/delete for the per-user health record
       collections: prescriptions, medicines, vital signs, symptom logs,
       activity and sleep logs.
How:   Each collection is described by a `RecordResource` (required fields,
       date fields, list order). Every operation is one collection call.

Record shape:
    {
        "_id": ObjectId,
        "userId": "u-123",
        <required fields>,
        <any extra attributes>,
        "createdAt": datetime,
        "updatedAt": datetime
    }
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaValidationError
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from medwell.database import invalid_field_names, parse_object_id, serialize_document, utcnow
from medwell.results import Err, Ok, Result
from medwell.schemas.common import UTCDateTime, missing_fields

logger = logging.getLogger(__name__)

_datetime_adapter = TypeAdapter(UTCDateTime)

PROTECTED_FIELDS = ("_id", "userId", "createdAt")


@dataclass(frozen=True)
class RecordResource:
    """Description of one health record collection and its HTTP prefix."""

    label: str
    prefix: str
    collection: str
    required: Tuple[str, ...]
    tag: str
    date_fields: Tuple[str, ...] = ()
    # Date fields filled with the current time when the client omits them
    default_now: Tuple[str, ...] = ()
    sort_field: str = "createdAt"
    sort_direction: int = DESCENDING

    @property
    def index_spec(self) -> Tuple[str, Tuple[Tuple[str, int], ...], bool]:
        return (
            self.collection,
            (("userId", ASCENDING), (self.sort_field, self.sort_direction)),
            False,
        )


PRESCRIPTIONS = RecordResource(
    label="Prescription",
    prefix="/api/prescriptions",
    collection="prescriptions",
    required=("userId", "doctorName", "issuedDate"),
    tag="Prescriptions",
    date_fields=("issuedDate",),
    sort_field="issuedDate",
)
MEDICINES = RecordResource(
    label="Medicine",
    prefix="/api/medicines",
    collection="medicines",
    required=("userId", "name", "dosage"),
    tag="Medicines",
)
VITAL_SIGNS = RecordResource(
    label="Vital sign",
    prefix="/api/vitalsigns",
    collection="vitalsigns",
    required=("userId", "type", "value"),
    tag="Vital Signs",
    date_fields=("recordedAt",),
    default_now=("recordedAt",),
    sort_field="recordedAt",
)
SYMPTOM_LOGS = RecordResource(
    label="Symptom",
    prefix="/api/symptoms",
    collection="symptoms",
    required=("userId", "name", "severity"),
    tag="Symptoms",
    date_fields=("recordedAt",),
    default_now=("recordedAt",),
    sort_field="recordedAt",
)
ACTIVITIES = RecordResource(
    label="Activity",
    prefix="/api/lifestyle/activity",
    collection="activities",
    required=("userId", "type", "duration"),
    tag="Lifestyle",
    date_fields=("date",),
    default_now=("date",),
    sort_field="date",
)
SLEEPS = RecordResource(
    label="Sleep log",
    prefix="/api/lifestyle/sleep",
    collection="sleeps",
    required=("userId", "hours"),
    tag="Lifestyle",
    date_fields=("date",),
    default_now=("date",),
    sort_field="date",
)

RESOURCES = (PRESCRIPTIONS, MEDICINES, VITAL_SIGNS, SYMPTOM_LOGS, ACTIVITIES, SLEEPS)


def _coerce_dates(resource: RecordResource, fields: Dict[str, Any]) -> Optional[Err]:
    """Parse the resource's date fields in place; returns an Err for bad values."""
    for name in resource.date_fields:
        if fields.get(name) in (None, ""):
            continue
        try:
            fields[name] = _datetime_adapter.validate_python(fields[name])
        except SchemaValidationError:
            return Err.invalid(f"{name} must be an ISO-8601 date or datetime")
    return None


class RecordService:
    """
    CRUD over a RecordResource.

    Error mapping:
        missing userId / required fields, malformed id or date → invalid_input (400)
        no record with the given id                             → not_found (404)
        PyMongoError                                            → server_error (500)
    """

    async def list_records(
        self, db: AsyncDatabase, resource: RecordResource, user_id: Optional[str]
    ) -> Result[list]:
        if not user_id:
            return Err.invalid("userId is required")

        try:
            cursor = db[resource.collection].find({"userId": user_id}).sort(
                resource.sort_field, resource.sort_direction
            )
            records = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error("Database error listing %s for %s: %s", resource.collection, user_id, str(e))
            return Err.from_exception("Server error", e)

        return Ok(serialize_document(records))

    async def create_record(
        self, db: AsyncDatabase, resource: RecordResource, body: Dict[str, Any]
    ) -> Result[dict]:
        if missing_fields(body, resource.required):
            return Err.invalid(f"{', '.join(resource.required)} required")

        record = {key: value for key, value in body.items() if key not in ("_id", "createdAt")}
        bad_names = invalid_field_names(record)
        if bad_names:
            return Err.invalid(f"Invalid field names: {', '.join(bad_names)}")

        err = _coerce_dates(resource, record)
        if err:
            return err

        now = utcnow()
        for name in resource.default_now:
            if record.get(name) in (None, ""):
                record[name] = now
        record["createdAt"] = now
        record["updatedAt"] = now

        try:
            result = await db[resource.collection].insert_one(record)
        except PyMongoError as e:
            logger.error("Database error creating %s: %s", resource.collection, str(e))
            return Err.from_exception("Server error", e)

        record["_id"] = result.inserted_id
        logger.info("%s %s created for userId=%s", resource.label, result.inserted_id, record["userId"])
        return Ok(serialize_document(record), status_code=201)

    async def get_record(
        self, db: AsyncDatabase, resource: RecordResource, record_id: str
    ) -> Result[dict]:
        oid = parse_object_id(record_id)
        if oid is None:
            return Err.invalid(f"Invalid {resource.label.lower()} id")

        try:
            record = await db[resource.collection].find_one({"_id": oid})
        except PyMongoError as e:
            logger.error("Database error fetching %s %s: %s", resource.collection, record_id, str(e))
            return Err.from_exception("Server error", e)

        if record is None:
            return Err.not_found(f"{resource.label} not found")
        return Ok(serialize_document(record))

    async def update_record(
        self,
        db: AsyncDatabase,
        resource: RecordResource,
        record_id: str,
        body: Dict[str, Any],
    ) -> Result[dict]:
        oid = parse_object_id(record_id)
        if oid is None:
            return Err.invalid(f"Invalid {resource.label.lower()} id")

        changes = {key: value for key, value in body.items() if key not in PROTECTED_FIELDS}
        bad_names = invalid_field_names(changes)
        if bad_names:
            return Err.invalid(f"Invalid field names: {', '.join(bad_names)}")

        err = _coerce_dates(resource, changes)
        if err:
            return err
        changes["updatedAt"] = utcnow()

        try:
            record = await db[resource.collection].find_one_and_update(
                {"_id": oid},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error("Database error updating %s %s: %s", resource.collection, record_id, str(e))
            return Err.from_exception("Server error", e)

        if record is None:
            return Err.not_found(f"{resource.label} not found")
        return Ok(serialize_document(record))

    async def delete_record(
        self, db: AsyncDatabase, resource: RecordResource, record_id: str
    ) -> Result[dict]:
        oid = parse_object_id(record_id)
        if oid is None:
            return Err.invalid(f"Invalid {resource.label.lower()} id")

        try:
            result = await db[resource.collection].delete_one({"_id": oid})
        except PyMongoError as e:
            logger.error("Database error deleting %s %s: %s", resource.collection, record_id, str(e))
            return Err.from_exception("Server error", e)

        if result.deleted_count == 0:
            return Err.not_found(f"{resource.label} not found")
        return Ok({"message": f"{resource.label} deleted", "id": record_id})


record_service = RecordService()
