import pytest
from django.contrib.auth.models import User
from rest_framework.test import APIClient

pytestmark = pytest.mark.django_db


def test_bearer_token_grants_api_access():
    User.objects.create_user(username="doc1", email="doc1@example.com", password="pass12345")
    c = APIClient()

    res = c.post("/api/v1/auth/token/", {"username": "doc1", "password": "pass12345"}, format="json")
    assert res.status_code == 200
    access = res.json()["access"]

    c.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
    res = c.get("/api/v1/journals/categories/")
    assert res.status_code == 200


def test_bad_credentials_are_rejected():
    res = APIClient().post("/api/v1/auth/token/", {"username": "nobody", "password": "x"}, format="json")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "authentication_failed"
