import pytest

from care.models import CommunityPost, DoctorReport

from .factories import client_for, make_appointment, make_patient

pytestmark = pytest.mark.django_db

POST = {'title': 'Managing asthma', 'content': 'What helped me most was a daily routine.', 'flair': 'Informative'}


def test_posts_are_public_and_authored_by_patients(patient_client, doctor_client, anon_client):
    r = patient_client.post('/api/community/posts', POST, format='json')
    assert r.status_code == 201
    assert r.data['patientName'] == 'Pat Smith'

    assert doctor_client.post('/api/community/posts', POST, format='json').status_code == 403
    assert anon_client.post('/api/community/posts', POST, format='json').status_code == 401

    rows = anon_client.get('/api/community/posts').data
    assert [row['title'] for row in rows] == ['Managing asthma']


def test_anonymous_post_hides_author(patient_client):
    r = patient_client.post('/api/community/posts', {**POST, 'anonymous': True}, format='json')
    assert r.data['patientName'] == 'Anonymous'


def test_post_validation(patient_client):
    r = patient_client.post('/api/community/posts', {**POST, 'content': 'too short'}, format='json')
    assert r.status_code == 400
    assert 'content' in r.data['error']['fields']


def test_only_author_edits_or_deletes(patient_client, patient):
    post_id = patient_client.post('/api/community/posts', POST, format='json').data['id']
    intruder = client_for(make_patient(email='intruder@example.com'))

    assert intruder.put(f'/api/community/posts/{post_id}', {'title': 'Hijacked'}, format='json').status_code == 403
    assert intruder.delete(f'/api/community/posts/{post_id}').status_code == 403

    r = patient_client.put(f'/api/community/posts/{post_id}', {'title': 'Living with asthma'}, format='json')
    assert r.status_code == 200
    assert r.data['title'] == 'Living with asthma'
    assert r.data['flair'] == 'Informative'

    assert patient_client.delete(f'/api/community/posts/{post_id}').status_code == 200
    assert not CommunityPost.objects.exists()


def test_admin_moderation(patient_client, admin_client):
    post_id = patient_client.post('/api/community/posts', POST, format='json').data['id']
    assert len(admin_client.get('/api/admin/community/posts').data) == 1
    assert admin_client.delete(f'/api/admin/community/posts/{post_id}').status_code == 200
    assert admin_client.delete(f'/api/admin/community/posts/{post_id}').status_code == 404
    assert patient_client.get('/api/admin/community/posts').status_code == 403


def test_report_lifecycle(patient_client, admin_client, patient, doctor):
    appt = make_appointment(patient, doctor)
    r = patient_client.post('/api/reports', {
        'doctorId': doctor.doctor_profile.id, 'type': 'appointment', 'appointmentId': appt.id,
        'issue': 'The doctor was forty minutes late.',
    }, format='json')
    assert r.status_code == 201
    assert r.data['status'] == 'pending'
    report_id = r.data['id']

    assert [row['id'] for row in patient_client.get('/api/patient/reports').data] == [report_id]
    assert [row['id'] for row in admin_client.get('/api/admin/reports').data] == [report_id]

    r = admin_client.put(f'/api/admin/reports/{report_id}', {'status': 'resolved', 'remarks': 'Spoke to them'},
                         format='json')
    assert r.status_code == 200
    report = DoctorReport.objects.get(pk=report_id)
    assert (report.status, report.remarks) == ('resolved', 'Spoke to them')


def test_report_appointment_must_belong_to_patient(patient, doctor):
    other = make_patient(email='other@example.com')
    appt = make_appointment(patient, doctor)
    r = client_for(other).post('/api/reports', {
        'doctorId': doctor.doctor_profile.id, 'type': 'appointment', 'appointmentId': appt.id,
        'issue': 'Something went wrong here.',
    }, format='json')
    assert r.status_code == 404
    assert not DoctorReport.objects.exists()


def test_reports_are_patient_and_admin_only(doctor_client, patient_client):
    assert doctor_client.post('/api/reports', {}, format='json').status_code == 403
    assert patient_client.get('/api/admin/reports').status_code == 403


def test_markup_is_stripped_from_posts(patient_client):
    body = {**POST, 'content': 'Read <a href="https://example.com">this guide</a> <b>before</b> a visit.'}
    r = patient_client.post('/api/community/posts', body, format='json')
    assert r.status_code == 201
    assert CommunityPost.objects.get(pk=r.data['id']).content == 'Read this guide before a visit.'
