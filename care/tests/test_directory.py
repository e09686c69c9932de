import pytest

from care.models import DoctorProfile

from .factories import make_doctor

pytestmark = pytest.mark.django_db


def test_active_doctors_requires_login(anon_client):
    assert anon_client.get('/api/doctors/active').status_code == 401


def test_active_doctors_hides_pending(patient_client, doctor):
    make_doctor(email='pending@example.com', status=DoctorProfile.STATUS_PENDING)
    rows = patient_client.get('/api/doctors/active').data
    assert [row['doctorId'] for row in rows] == [doctor.doctor_profile.id]


def test_public_search(anon_client, doctor):
    make_doctor(email='skin@example.com', first='Sam', last='Reed', specialization='Dermatology')
    rows = anon_client.get('/api/doctors/search', {'query': 'derm'}).data
    assert [row['lastName'] for row in rows] == ['Reed']
    rows = anon_client.get('/api/doctors/search', {'query': 'house'}).data
    assert [row['doctorId'] for row in rows] == [doctor.doctor_profile.id]


def test_search_requires_query(anon_client):
    r = anon_client.get('/api/doctors/search')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'validation_error'


def test_pagination(patient_client, doctor):
    make_doctor(email='b@example.com', first='Zed')
    rows = patient_client.get('/api/doctors/active', {'page': 2, 'pageSize': 1}).data
    assert [row['firstName'] for row in rows] == ['Zed']
    assert patient_client.get('/api/doctors/active', {'page': 'x'}).status_code == 400


def test_healthz(client):
    r = client.get('/healthz')
    assert r.status_code == 200
    assert r.json() == {'ok': True, 'db': True}
