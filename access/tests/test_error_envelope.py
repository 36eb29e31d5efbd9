from __future__ import annotations

import pytest

from access.errors import Conflict
from access.handlers import api_exception_handler
from access.tests.factories import client_for, make_user


@pytest.mark.django_db
def test_missing_token_is_401_with_bearer_challenge():
    r = client_for().get("/api/v1/courses/")
    assert r.status_code == 401
    assert r["WWW-Authenticate"] == "Bearer"
    assert r.json()["success"] is False
    assert r.json()["message"]


@pytest.mark.django_db
def test_garbage_token_is_401():
    from rest_framework.test import APIClient

    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION="Bearer nonsense")
    r = c.get("/api/v1/courses/")
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Invalid or expired token."}


@pytest.mark.django_db
def test_not_found_uses_envelope():
    c = client_for(make_user("env_s"))
    r = c.get("/api/v1/courses/424242/")
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Course not found."}


@pytest.mark.django_db
def test_serializer_errors_carry_field_map():
    c = client_for(make_user("env_t", role="teacher"))
    r = c.post("/api/v1/courses/", {"title": "No code"}, format="json")
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert "code" in body["errors"]


def test_conflict_includes_conflict_id():
    response = api_exception_handler(Conflict("Taken.", conflict_id=7), {})
    assert response.status_code == 400
    assert response.data == {"success": False, "message": "Taken.", "conflict_id": 7}
