import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from care.services.accounts import ensure_admin_user

from .factories import client_for, make_doctor, make_patient


@pytest.fixture(autouse=True)
def _clear_throttles():
    # throttle counters live in the local memory cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def patient(db):
    return make_patient()


@pytest.fixture
def doctor(db):
    return make_doctor()


@pytest.fixture
def admin(db):
    user, _created = ensure_admin_user()
    return user


@pytest.fixture
def patient_client(patient):
    return client_for(patient)


@pytest.fixture
def doctor_client(doctor):
    return client_for(doctor)


@pytest.fixture
def admin_client(admin):
    return client_for(admin)


@pytest.fixture
def anon_client():
    return APIClient()
