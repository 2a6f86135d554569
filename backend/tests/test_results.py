"""
MedWell Backend — Result Rendering Tests
==========================================

What we test:
    ✅ Error kinds map to 400/404/500
    ✅ Err.from_exception keeps the underlying message
    ✅ render() encodes Ok payloads (datetimes, status codes)
"""

import json
from datetime import datetime, timezone

from medwell.exceptions import CompletionServiceError
from medwell.results import Err, ErrorKind, Ok, render


def test_status_codes():
    assert Err.invalid("x").status_code == 400
    assert Err.not_found("x").status_code == 404
    assert Err(ErrorKind.SERVER_ERROR, "x").status_code == 500


def test_from_exception_uses_message_attribute():
    err = Err.from_exception("Chat error", CompletionServiceError("quota exceeded"))
    assert err.kind is ErrorKind.SERVER_ERROR
    assert err.detail == "quota exceeded"


def test_from_exception_without_text():
    assert Err.from_exception("Server error", RuntimeError()).detail == "RuntimeError"


def test_render_err_body():
    response = render(Err.not_found("User not found"))

    assert response.status_code == 404
    body = json.loads(response.body)
    assert body["error"] == "not_found"
    assert body["message"] == "User not found"
    assert body["detail"] is None


def test_render_ok_encodes_datetimes():
    response = render(Ok({"at": datetime(2024, 5, 1, tzinfo=timezone.utc)}, status_code=201))

    assert response.status_code == 201
    assert json.loads(response.body) == {"at": "2024-05-01T00:00:00+00:00"}
