"""
Shared schema types: UTC datetimes, error and health responses.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, Field
from typing_extensions import Annotated


def _expand_date_only(value: Any) -> Any:
    # "2024-05-01" → "2024-05-01T00:00:00"
    if isinstance(value, str) and len(value.strip()) == 10:
        return f"{value.strip()}T00:00:00"
    return value


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Accepts ISO-8601 dates or datetimes; naive values are taken as UTC
UTCDateTime = Annotated[datetime, BeforeValidator(_expand_date_only), AfterValidator(_as_utc)]


def missing_fields(payload: Dict[str, Any], required: Iterable[str]) -> List[str]:
    """Required names whose value is absent, null or an empty string."""
    return [name for name in required if payload.get(name) is None or payload.get(name) == ""]


class ErrorResponse(BaseModel):
    """
    Error body for every 4xx/5xx produced by the application.

    Example:
        {
            "error": "invalid_input",
            "message": "userId is required",
            "detail": null,
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Error kind: invalid_input, not_found, server_error")
    message: str = Field(description="Human-readable error description")
    detail: Optional[str] = Field(default=None, description="Underlying error message (500 only)")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(BaseModel):
    message: str
    id: Optional[str] = None


class HealthResponse(BaseModel):
    """Returned by GET /health for platform probes."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Document store connectivity: connected, disconnected")
    llm: str = Field(description="Completion provider: configured, not_configured")
    uptime_seconds: float = Field(description="Seconds since service started")
