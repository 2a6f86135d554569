"""
MedWell Backend — Tagged Handler Results
==========================================

What:  The value every service operation returns: `Ok` with a payload and a
       success status, or `Err` with one of three error kinds.
How:   Routes pass the result to `render()`, which produces the JSON response.
       Services never raise for expected failures (missing input, absent
       record, store or vendor outage); they return an `Err` instead.

Error kinds:
    invalid_input  → 400  missing/invalid required field
    not_found      → 404  requested resource absent
    server_error   → 500  store or vendor failure, underlying message in `detail`

Error body:
    {
        "error": "not_found",
        "message": "User not found",
        "detail": null,
        "request_id": "a1b2c3d4"
    }
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar, Union

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from medwell.middleware.request_id import request_id_var

T = TypeVar("T")


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"


STATUS_BY_KIND = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.SERVER_ERROR: 500,
}


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    status_code: int = 200


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str
    detail: Optional[str] = None

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    @classmethod
    def invalid(cls, message: str) -> "Err":
        return cls(ErrorKind.INVALID_INPUT, message)

    @classmethod
    def not_found(cls, message: str) -> "Err":
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def from_exception(cls, message: str, exc: BaseException) -> "Err":
        """Server error carrying the underlying exception text as `detail`."""
        detail = getattr(exc, "message", None) or str(exc) or type(exc).__name__
        return cls(ErrorKind.SERVER_ERROR, message, detail)


Result = Union[Ok[T], Err]


def error_response(err: Err) -> JSONResponse:
    return JSONResponse(
        status_code=err.status_code,
        content={
            "error": err.kind.value,
            "message": err.message,
            "detail": err.detail,
            "request_id": request_id_var.get(""),
        },
    )


def render(result: Result[Any]) -> JSONResponse:
    """Convert a service result into the HTTP response for the route."""
    if isinstance(result, Err):
        return error_response(result)
    return JSONResponse(status_code=result.status_code, content=jsonable_encoder(result.value))
