"""
User profile schemas.

A profile is the three named fields plus an open map of extra attributes;
whatever the client sends beyond userId/name/email is kept in `model_extra`.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

REQUIRED_PROFILE_FIELDS = ("userId", "name", "email")


class ProfileUpsert(BaseModel):
    """Body of POST /api/user/profile."""

    model_config = ConfigDict(extra="allow")

    userId: Optional[str] = Field(default=None, description="Externally supplied user identifier")
    name: Optional[str] = None
    email: Optional[str] = None

    @property
    def attributes(self) -> Dict[str, Any]:
        """Additional profile attributes beyond the named fields."""
        return dict(self.model_extra or {})

    def named_fields(self) -> Dict[str, Any]:
        return {"userId": self.userId, "name": self.name, "email": self.email}
