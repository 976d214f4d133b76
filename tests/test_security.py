# SPDX-License-Identifier: Apache-2.0
"""Error taxonomy to HTTP status mapping and requester identity."""
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from ohmage.core.exceptions import (
    AuthenticationError,
    DataAccessError,
    InsufficientPermissionsError,
    InvalidArgumentError,
    OhmageError,
    UnknownEntityError,
)
from ohmage.core.security import add_security_middleware, status_for


@pytest.mark.parametrize(
    "exc,status",
    [
        (InvalidArgumentError("x"), 400),
        (AuthenticationError("x"), 401),
        (InsufficientPermissionsError("x"), 403),
        (UnknownEntityError("x"), 404),
        (DataAccessError(), 500),
        (OhmageError("x"), 500),
    ],
)
def test_status_for(exc, status):
    assert status_for(exc) == status


def _app_raising(exc):
    app = FastAPI()
    add_security_middleware(app)

    @app.get("/boom")
    def boom():
        raise exc

    return TestClient(app)


def test_denial_body_carries_code_and_message():
    r = _app_raising(InsufficientPermissionsError("no access")).get("/boom")
    assert r.status_code == 403
    assert r.json() == {
        "result": "failure",
        "errors": [{"code": "CAMPAIGN_INSUFFICIENT_PERMISSIONS", "text": "no access"}],
    }
    assert r.headers["X-Content-Type-Options"] == "nosniff"


def test_data_access_error_is_generic():
    err = DataAccessError()
    err.__cause__ = RuntimeError("password=hunter2")
    r = _app_raising(err).get("/boom")
    assert r.status_code == 500
    body = r.json()
    assert body["errors"][0]["code"] == "SERVER_GENERAL_ERROR"
    assert "hunter2" not in r.text
    assert "error_id" in body


def test_missing_requester_is_401(client):
    r = client.get("/campaigns")
    assert r.status_code == 401
    assert r.json()["errors"][0]["code"] == "AUTHENTICATION_FAILED"
