from datetime import timedelta

import pytest
from django.utils import timezone

from care.models import AuditEvent, DoctorProfile

from .factories import PASSWORD, client_for, make_appointment, make_doctor, make_patient

pytestmark = pytest.mark.django_db


def test_admin_endpoints_reject_other_roles(patient_client, doctor_client, anon_client):
    for url in ('/api/admin/users', '/api/admin/doctors', '/api/admin/patients',
                '/api/admin/pending-doctors', '/api/admin/stats'):
        assert patient_client.get(url).status_code == 403
        assert doctor_client.get(url).status_code == 403
        assert anon_client.get(url).status_code == 401


def test_doctor_lists_split_on_status(admin_client, doctor):
    pending = make_doctor(email='pending@example.com', status=DoctorProfile.STATUS_PENDING)
    approved = [row['doctorId'] for row in admin_client.get('/api/admin/doctors').data]
    waiting = [row['doctorId'] for row in admin_client.get('/api/admin/pending-doctors').data]
    assert approved == [doctor.doctor_profile.id]
    assert waiting == [pending.doctor_profile.id]


def test_users_and_patients_listing(admin_client, admin, patient, doctor):
    emails = {row['email'] for row in admin_client.get('/api/admin/users').data}
    assert {admin.email, patient.email, doctor.email} <= emails
    rows = admin_client.get('/api/admin/patients').data
    assert [row['patientId'] for row in rows] == [patient.patient_profile.id]


def test_stats(admin_client, patient, doctor):
    make_doctor(email='pending@example.com', status=DoctorProfile.STATUS_PENDING)
    make_doctor(email='retired@example.com', status=DoctorProfile.STATUS_INACTIVE)
    make_appointment(patient, doctor, appointment_date=timezone.now())
    make_appointment(patient, doctor, appointment_date=timezone.now() + timedelta(days=3))
    assert admin_client.get('/api/admin/stats').data == {
        'totalPatients': 1,
        'activeDoctorCount': 2,
        'pendingDoctorCount': 1,
        'appointmentsToday': 1,
    }


def test_doctor_status_update(admin_client, admin):
    doc = make_doctor(email='pending@example.com', status=DoctorProfile.STATUS_PENDING)
    url = f'/api/admin/doctors/{doc.doctor_profile.id}/status'

    r = admin_client.put(url, {'status': 'active'}, format='json')
    assert r.status_code == 200
    assert r.data == {'message': 'Doctor status updated to active'}
    doc.doctor_profile.refresh_from_db()
    assert doc.doctor_profile.status == DoctorProfile.STATUS_ACTIVE
    assert AuditEvent.objects.filter(action='doctor_status', object_id=doc.doctor_profile.id, user=admin).exists()

    r = admin_client.put(url, {'status': 'retired'}, format='json')
    assert r.status_code == 400
    assert r.data['error']['message'] == 'status: Invalid status value'

    assert admin_client.put('/api/admin/doctors/999999/status', {'status': 'active'},
                            format='json').status_code == 404


def test_doctor_cannot_approve_itself(doctor):
    r = client_for(doctor).put(f'/api/admin/doctors/{doctor.doctor_profile.id}/status', {'status': 'active'},
                               format='json')
    assert r.status_code == 403


def test_user_status_switch(admin_client, admin, anon_client):
    patient = make_patient()
    doc = make_doctor()

    r = admin_client.put('/api/admin/status', {'userId': patient.id, 'status': 'inactive'}, format='json')
    assert r.status_code == 200
    patient.refresh_from_db()
    assert patient.is_active is False
    r = anon_client.post('/api/login', {'email': patient.email, 'password': PASSWORD}, format='json')
    assert r.status_code == 401

    assert admin_client.put('/api/admin/status', {'userId': doc.id, 'status': 'inactive'},
                            format='json').status_code == 200
    doc.doctor_profile.refresh_from_db()
    assert doc.doctor_profile.status == DoctorProfile.STATUS_INACTIVE
    assert AuditEvent.objects.filter(action='user_status', object_id=doc.id, user=admin).exists()


def test_user_status_rejects_bad_targets(admin_client, admin, patient_client):
    assert admin_client.put('/api/admin/status', {'userId': 999999, 'status': 'inactive'},
                            format='json').status_code == 404
    assert admin_client.put('/api/admin/status', {'userId': admin.id, 'status': 'inactive'},
                            format='json').status_code == 400
    assert admin_client.put('/api/admin/status', {'userId': admin.id, 'status': 'pending'},
                            format='json').status_code == 400
    assert patient_client.put('/api/admin/status', {'userId': admin.id, 'status': 'active'},
                              format='json').status_code == 403
