import pytest
from django.core.management import call_command
from rest_framework_simplejwt.tokens import AccessToken

from care.models import AuditEvent, DoctorProfile, PatientProfile, User
from care.services.accounts import ensure_admin_user

from .factories import PASSWORD, client_for, make_doctor

pytestmark = pytest.mark.django_db


def _register(client, **overrides):
    body = {
        'firstName': 'Ada',
        'lastName': 'Lovelace',
        'email': 'ada@example.com',
        'password': PASSWORD,
        'phone': '555-0100',
        'userType': 'patient',
        'dateOfBirth': '1990-05-01',
        'address': '12 Analytical St',
        'medicalHistory': 'asthma, hypertension',
    }
    body.update(overrides)
    return client.post('/api/register', body, format='json')


def test_register_patient_creates_user_and_profile(anon_client):
    r = _register(anon_client)
    assert r.status_code == 201
    assert r.data['message'] == 'Registration successful'
    assert r.data['userType'] == 'patient'
    user = User.objects.get(pk=r.data['userId'])
    assert user.email == 'ada@example.com'
    assert user.username == 'ada@example.com'
    assert user.check_password(PASSWORD)
    assert PatientProfile.objects.filter(user=user).count() == 1
    token = AccessToken(r.data['token'])
    assert token['userId'] == user.id
    assert token['userType'] == 'patient'


def test_register_doctor_starts_pending(anon_client):
    r = _register(anon_client, email='doc1@example.com', userType='doctor',
                  specialization='Neurology', licenseNumber='LN-1', experience=7)
    assert r.status_code == 201
    profile = DoctorProfile.objects.get(user_id=r.data['userId'])
    assert profile.status == DoctorProfile.STATUS_PENDING
    assert profile.specialization == 'Neurology'
    assert profile.experience == 7


def test_register_duplicate_email_is_conflict(anon_client):
    assert _register(anon_client).status_code == 201
    r = _register(anon_client, email='ADA@example.com')
    assert r.status_code == 400
    assert r.data['ok'] is False
    assert r.data['error']['code'] == 'conflict'
    assert User.objects.filter(email__iexact='ada@example.com').count() == 1


def test_register_rejects_admin_user_type(anon_client):
    r = _register(anon_client, userType='admin')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'validation_error'
    assert 'userType' in r.data['error']['fields']
    assert not User.objects.filter(email='ada@example.com').exists()


def test_register_rejects_weak_password(anon_client):
    r = _register(anon_client, password='123')
    assert r.status_code == 400
    assert 'password' in r.data['error']['fields']


def test_login_returns_token_and_profile(anon_client):
    assert _register(anon_client).status_code == 201
    r = anon_client.post('/api/login', {'email': 'ada@example.com', 'password': PASSWORD}, format='json')
    assert r.status_code == 200
    assert r.data['userType'] == 'patient'
    assert r.data['userData']['userId'] == r.data['userId']
    assert r.data['token']
    assert AccessToken(r.data['token'])['userId'] == r.data['userId']


def test_login_wrong_password_is_401_and_audited(anon_client):
    assert _register(anon_client).status_code == 201
    r = anon_client.post('/api/login', {'email': 'ada@example.com', 'password': 'nope'}, format='json')
    assert r.status_code == 401
    assert r.data['error']['code'] == 'invalid_credentials'
    assert AuditEvent.objects.filter(action='login', detail__result='fail').exists()


def test_login_unknown_email_is_401(anon_client):
    r = anon_client.post('/api/login', {'email': 'ghost@example.com', 'password': PASSWORD}, format='json')
    assert r.status_code == 401


def test_pending_doctor_cannot_login_until_approved(anon_client, admin_client):
    doc = make_doctor(email='newdoc@example.com', status=DoctorProfile.STATUS_PENDING)
    creds = {'email': 'newdoc@example.com', 'password': PASSWORD}

    r = anon_client.post('/api/login', creds, format='json')
    assert r.status_code == 403
    assert r.data['error']['code'] == 'pending_approval'

    r = admin_client.put(f'/api/admin/doctors/{doc.doctor_profile.id}/status', {'status': 'active'}, format='json')
    assert r.status_code == 200

    r = anon_client.post('/api/login', creds, format='json')
    assert r.status_code == 200
    assert r.data['userType'] == 'doctor'


def test_missing_token_is_401(anon_client):
    r = anon_client.get('/api/profile')
    assert r.status_code == 401
    assert r.data['error']['code'] == 'unauthenticated'


def test_invalid_token_is_403(anon_client):
    anon_client.credentials(HTTP_AUTHORIZATION='Bearer not-a-real-token')
    r = anon_client.get('/api/profile')
    assert r.status_code == 403
    assert r.data['error']['code'] == 'invalid_token'


def test_profile_get_returns_role_profile(patient_client, patient):
    r = patient_client.get('/api/profile')
    assert r.status_code == 200
    assert r.data['user']['email'] == patient.email
    assert r.data['patient']['id'] == patient.patient_profile.id


def test_doctor_profile_includes_rating_summary(doctor_client):
    r = doctor_client.get('/api/profile')
    assert r.status_code == 200
    assert r.data['doctor']['ratingCount'] == 0
    assert r.data['doctor']['averageRating'] is None


def test_profile_update_touches_user_and_profile(patient_client, patient):
    r = patient_client.put('/api/profile', {
        'firstName': 'Patty',
        'email': 'patty@example.com',
        'address': '1 New Road',
        'bloodType': 'O+',
    }, format='json')
    assert r.status_code == 200
    assert r.data['message'] == 'Profile updated successfully'
    patient.refresh_from_db()
    assert patient.first_name == 'Patty'
    assert patient.email == 'patty@example.com'
    assert patient.username == 'patty@example.com'
    profile = PatientProfile.objects.get(user=patient)
    assert profile.address == '1 New Road'
    assert profile.blood_type == 'O+'


def test_profile_update_rejects_taken_email(patient_client, doctor):
    r = patient_client.put('/api/profile', {'email': doctor.email}, format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'conflict'


def test_ensure_admin_user_is_idempotent():
    first, _ = ensure_admin_user()
    again, created = ensure_admin_user()
    assert created is False
    assert again.pk == first.pk
    assert User.objects.filter(role=User.ROLE_ADMIN).count() == 1


def test_ensure_admin_command_creates_admin_when_missing(settings):
    User.objects.filter(role=User.ROLE_ADMIN).delete()
    settings.ADMIN_EMAIL = 'root@example.com'
    call_command('ensure_admin')
    admin = User.objects.get(role=User.ROLE_ADMIN)
    assert admin.email == 'root@example.com'
    assert admin.check_password(settings.ADMIN_PASSWORD)
    r = client_for(admin).get('/api/admin/stats')
    assert r.status_code == 200
