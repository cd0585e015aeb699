import pytest
from django.contrib.auth.models import AnonymousUser, User
from django.http import HttpResponse
from django.test import RequestFactory
from rest_framework.exceptions import ValidationError

from ipd_core.common.api.exceptions import (
    ConflictError,
    StorageUnavailableError,
    api_exception_handler,
    build_error_envelope,
)
from ipd_core.common.middleware import RequestIdMiddleware


def _handle(exc, request=None):
    return api_exception_handler(exc, {"request": request, "view": None})


def test_envelope_shape_and_request_id_reuse():
    rf = RequestFactory()
    req = rf.get("/api/v1/journals/categories/")
    req.request_id = "abc123"

    body = build_error_envelope(request=req, code="not_found", message="Missing.", details=None)

    assert body == {
        "error": {"code": "not_found", "message": "Missing.", "details": None, "request_id": "abc123"}
    }


def test_validation_errors_carry_field_details():
    res = _handle(ValidationError({"note_text": ["This field may not be blank."]}))

    assert res.status_code == 400
    err = res.data["error"]
    assert err["code"] == "validation_error"
    assert err["message"] == "Request failed."
    assert "note_text" in err["details"]
    assert err["request_id"]


def test_conflict_and_storage_codes():
    res = _handle(ConflictError("Entries in vitals cannot be edited."))
    assert res.status_code == 409
    assert res.data["error"]["code"] == "conflict"
    assert res.data["error"]["message"] == "Entries in vitals cannot be edited."

    res = _handle(StorageUnavailableError())
    assert res.status_code == 503
    assert res.data["error"]["code"] == "storage_unavailable"


def test_unhandled_exception_becomes_server_error():
    res = _handle(RuntimeError("boom"))
    assert res.status_code == 500
    assert res.data["error"]["code"] == "server_error"


def test_middleware_reuses_safe_incoming_request_id():
    rf = RequestFactory()
    req = rf.get("/", HTTP_X_REQUEST_ID="gateway-42")
    req.user = AnonymousUser()

    mw = RequestIdMiddleware(get_response=lambda r: HttpResponse("ok"))
    resp = mw(req)

    assert req.request_id == "gateway-42"
    assert resp["X-Request-Id"] == "gateway-42"


def test_middleware_replaces_unsafe_request_id():
    rf = RequestFactory()
    req = rf.get("/", HTTP_X_REQUEST_ID="bad id with spaces")

    mw = RequestIdMiddleware(get_response=lambda r: HttpResponse("ok"))
    resp = mw(req)

    assert req.request_id != "bad id with spaces"
    assert resp["X-Request-Id"] == req.request_id


@pytest.mark.django_db
def test_api_error_request_id_matches_response_header(client):
    user = User.objects.create_user(username="u1", password="pass123")
    client.force_login(user)

    resp = client.get("/api/v1/admissions/999/journals/vitals/", HTTP_X_REQUEST_ID="trace-1")

    assert resp.status_code == 404
    assert resp["X-Request-Id"] == "trace-1"
    assert resp.json()["error"]["request_id"] == "trace-1"
