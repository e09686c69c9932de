"""
Appointment lifecycle: booking, the status graph, role ownership and the
listings built on top of it.
"""
import pytest
from django.utils import timezone

from care.models import Appointment, AppointmentTransition, DoctorProfile

from .factories import client_for, make_appointment, make_doctor, make_patient

pytestmark = pytest.mark.django_db


def _book(client, doctor, **overrides):
    body = {
        'doctorId': doctor.doctor_profile.id,
        'appointmentDate': '2031-03-14',
        'appointmentTime': '02:30 PM',
        'reason': 'checkup',
        'appointmentType': 'consultation',
    }
    body.update(overrides)
    return client.post('/api/appointmentBook', body, format='json')


def test_book_creates_pending_appointment(patient_client, patient, doctor):
    r = _book(patient_client, doctor)
    assert r.status_code == 201
    assert r.data['message'] == 'Appointment booked successfully'
    appt = Appointment.objects.get(pk=r.data['appointment']['id'])
    assert appt.status == Appointment.STATUS_PENDING
    assert appt.patient_id == patient.patient_profile.id
    local = timezone.localtime(appt.appointment_date)
    assert (local.year, local.month, local.day, local.hour, local.minute) == (2031, 3, 14, 14, 30)


def test_book_accepts_iso_timestamp(patient_client, doctor):
    r = _book(patient_client, doctor, appointmentDate='2031-03-14T09:15:00', appointmentTime='')
    assert r.status_code == 201
    assert r.data['appointment']['appointmentTime'] == '09:15'


def test_book_requires_reason(patient_client, doctor):
    r = _book(patient_client, doctor, reason='   ')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'validation_error'
    assert not Appointment.objects.exists()


def test_book_rejects_garbage_time(patient_client, doctor):
    r = _book(patient_client, doctor, appointmentTime='teatime')
    assert r.status_code == 400


def test_book_requires_active_doctor(patient_client):
    pending = make_doctor(email='pending@example.com', status=DoctorProfile.STATUS_PENDING)
    r = _book(patient_client, pending)
    assert r.status_code == 404


def test_book_is_patient_only(doctor_client, doctor):
    r = _book(doctor_client, doctor)
    assert r.status_code == 403
    assert r.data['error']['code'] == 'forbidden'


def test_full_lifecycle_visible_to_patient(patient_client, doctor_client, patient, doctor):
    appt_id = _book(patient_client, doctor).data['appointment']['id']

    r = doctor_client.put(f'/api/appointments/{appt_id}/status', {'status': 'scheduled'}, format='json')
    assert r.status_code == 200
    rows = patient_client.get('/api/appointments').data
    assert [row['status'] for row in rows if row['id'] == appt_id] == ['scheduled']
    assert rows[0]['doctorName'] == 'Dr. Dana House'

    r = doctor_client.put(f'/api/appointments/{appt_id}/status', {'status': 'completed'}, format='json')
    assert r.status_code == 200
    history = list(
        AppointmentTransition.objects.filter(appointment_id=appt_id)
        .order_by('id').values_list('from_status', 'to_status')
    )
    assert history == [('pending', 'scheduled'), ('scheduled', 'completed')]


@pytest.mark.parametrize('start,target', [
    ('pending', 'completed'),
    ('completed', 'scheduled'),
    ('cancelled', 'pending'),
    ('completed', 'cancelled'),
])
def test_transition_graph_rejects_illegal_moves(doctor_client, patient, doctor, start, target):
    appt = make_appointment(patient, doctor, status=start)
    r = doctor_client.put(f'/api/appointments/{appt.id}/status', {'status': target}, format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'invalid_transition'
    appt.refresh_from_db()
    assert appt.status == start


def test_unknown_status_is_rejected(doctor_client, patient, doctor):
    appt = make_appointment(patient, doctor)
    r = doctor_client.put(f'/api/appointments/{appt.id}/status', {'status': 'teleported'}, format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'validation_error'


def test_patient_may_only_cancel(patient_client, patient, doctor):
    appt = make_appointment(patient, doctor)
    r = patient_client.put(f'/api/appointments/{appt.id}/status', {'status': 'scheduled'}, format='json')
    assert r.status_code == 403
    r = patient_client.put(f'/api/appointments/{appt.id}/status', {'status': 'cancelled'}, format='json')
    assert r.status_code == 200
    appt.refresh_from_db()
    assert appt.status == Appointment.STATUS_CANCELLED


@pytest.mark.parametrize('terminal', [Appointment.STATUS_COMPLETED, Appointment.STATUS_CANCELLED])
def test_patient_cannot_cancel_finished_appointment(patient_client, patient, doctor, terminal):
    appt = make_appointment(patient, doctor, status=terminal)
    r = patient_client.put(f'/api/appointments/{appt.id}/status', {'status': 'cancelled'}, format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'invalid_transition'
    appt.refresh_from_db()
    assert appt.status == terminal
    assert not AppointmentTransition.objects.filter(appointment=appt).exists()


def test_patient_cannot_touch_someone_elses_appointment(patient, doctor):
    other = make_patient(email='other@example.com')
    appt = make_appointment(patient, doctor)
    r = client_for(other).put(f'/api/appointments/{appt.id}/status', {'status': 'cancelled'}, format='json')
    assert r.status_code == 403


def test_doctor_cannot_touch_other_doctors_appointment(patient, doctor):
    other = make_doctor(email='other-doc@example.com')
    appt = make_appointment(patient, doctor)
    r = client_for(other).put(f'/api/appointments/{appt.id}/status', {'status': 'scheduled'}, format='json')
    assert r.status_code == 403
    appt.refresh_from_db()
    assert appt.status == Appointment.STATUS_PENDING


def test_admin_bypasses_ownership(admin_client, patient, doctor):
    appt = make_appointment(patient, doctor)
    r = admin_client.put(f'/api/appointments/{appt.id}/status', {'status': 'scheduled'}, format='json')
    assert r.status_code == 200


def test_missing_appointment_is_404(doctor_client):
    r = doctor_client.put('/api/appointments/999999/status', {'status': 'scheduled'}, format='json')
    assert r.status_code == 404


def test_listing_is_role_scoped(patient, doctor, admin_client):
    other_patient = make_patient(email='p2@example.com', first='Quinn', last='Lee')
    other_doctor = make_doctor(email='d2@example.com')
    mine = make_appointment(patient, doctor)
    make_appointment(other_patient, other_doctor)

    rows = client_for(patient).get('/api/appointments').data
    assert [row['id'] for row in rows] == [mine.id]

    rows = client_for(doctor).get('/api/appointments').data
    assert [row['id'] for row in rows] == [mine.id]
    assert rows[0]['patientName'] == 'Pat Smith'

    assert len(admin_client.get('/api/appointments').data) == 2


def test_unrated_lists_completed_without_rating(patient_client, patient, doctor):
    done = make_appointment(patient, doctor, status=Appointment.STATUS_COMPLETED)
    make_appointment(patient, doctor, status=Appointment.STATUS_COMPLETED, is_rated=True)
    make_appointment(patient, doctor, status=Appointment.STATUS_SCHEDULED)
    rows = patient_client.get('/api/appointments/unrated').data
    assert [row['id'] for row in rows] == [done.id]


def test_unrecorded_lists_appointments_without_records(doctor_client, patient, doctor):
    appt = make_appointment(patient, doctor, status=Appointment.STATUS_COMPLETED)
    r = doctor_client.get('/api/appointmentRecord', {'patientId': patient.patient_profile.id, 'status': 'completed'})
    assert r.status_code == 200
    assert [row['id'] for row in r.data] == [appt.id]

    doctor_client.post('/api/medicalrecords', {
        'patientId': patient.patient_profile.id, 'appointmentId': appt.id, 'diagnosis': 'flu',
    }, format='json')
    r = doctor_client.get('/api/appointmentRecord', {'patientId': patient.patient_profile.id, 'status': 'completed'})
    assert r.data == []


def test_unrecorded_is_own_patient_only(patient, doctor):
    other = make_patient(email='nosy@example.com')
    r = client_for(other).get('/api/appointmentRecord', {'patientId': patient.patient_profile.id,
                                                         'status': 'completed'})
    assert r.status_code == 403
