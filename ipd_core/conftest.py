# ipd_core/conftest.py
import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from ipd_core.admissions.models import Admission
from ipd_core.common import events
from ipd_core.patients.models import Patient


@pytest.fixture
def user(db):
    User = get_user_model()
    return User.objects.create_user(
        username="nurse1",
        email="nurse1@example.com",
        password="testpass",
        is_active=True,
    )


@pytest.fixture
def other_user(db):
    User = get_user_model()
    return User.objects.create_user(
        username="nurse2",
        email="nurse2@example.com",
        password="testpass",
        is_active=True,
    )


@pytest.fixture
def api_client(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c


@pytest.fixture
def other_client(other_user):
    c = APIClient()
    c.force_authenticate(user=other_user)
    return c


@pytest.fixture
def anon_client():
    return APIClient()


@pytest.fixture
def patient(db):
    return Patient.objects.create(
        uhid="UHID-TEST-001",
        full_name="Test Patient",
        phone="9999999999",
        gender="female",
    )


@pytest.fixture
def admission(db, patient):
    return Admission.objects.create(
        patient=patient,
        ward="General",
        bed="B-12",
        attending_doctor="Dr. Rao",
        reason="Fever",
    )


@pytest.fixture
def journal_events():
    """
    Collect journal.changed payloads published during a test.
    """
    received = []
    remove = events.add_listener("journal.changed", received.append)
    yield received
    remove()
