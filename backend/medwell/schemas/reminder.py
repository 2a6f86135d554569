"""
Reminder schemas.
"""

from typing import Optional

from pydantic import BaseModel, Field

from medwell.schemas.common import UTCDateTime

REQUIRED_REMINDER_FIELDS = ("userId", "title", "dueDate")


class ReminderCreate(BaseModel):
    """Body of POST /api/reminders."""
    userId: Optional[str] = None
    title: Optional[str] = None
    dueDate: Optional[UTCDateTime] = Field(default=None, description="ISO-8601 date or datetime")
    description: Optional[str] = None
