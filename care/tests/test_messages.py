import pytest
from asgiref.sync import async_to_sync
from channels.db import database_sync_to_async
from channels.testing import WebsocketCommunicator

from care.authentication import issue_token
from care.models import Message
from care.services.messaging import INITIAL_MESSAGE, send_message

from .factories import client_for, make_doctor, make_patient


@pytest.mark.django_db
def test_send_and_read_thread(patient, doctor):
    r = client_for(patient).post('/api/messages', {'receiverId': doctor.id, 'content': 'Hello <b>doc</b>'},
                                 format='json')
    assert r.status_code == 201
    assert r.data['message'] == 'Message sent successfully'
    msg = Message.objects.get(pk=r.data['id'])
    assert msg.content == 'Hello doc'
    assert msg.is_read is False

    thread = client_for(doctor).get(f'/api/messages/{patient.id}').data
    assert [m['content'] for m in thread] == ['Hello doc']
    assert thread[0]['senderUserType'] == 'patient'
    msg.refresh_from_db()
    assert msg.is_read is True


@pytest.mark.django_db
def test_thread_does_not_mark_own_messages_read(patient, doctor):
    msg = send_message(patient, doctor.id, 'ping')
    client_for(patient).get(f'/api/messages/{doctor.id}')
    msg.refresh_from_db()
    assert msg.is_read is False


@pytest.mark.django_db
def test_send_validation(patient):
    client = client_for(patient)
    assert client.post('/api/messages', {'receiverId': 999999, 'content': 'hi'}, format='json').status_code == 404
    assert client.post('/api/messages', {'receiverId': patient.id, 'content': 'hi'},
                       format='json').status_code == 400
    assert client.post('/api/messages', {'receiverId': patient.id}, format='json').status_code == 400


@pytest.mark.django_db
def test_conversations_list_counterparts_of_opposite_role(patient, doctor):
    send_message(patient, doctor.id, 'hello')
    rows = client_for(patient).get('/api/conversations').data
    assert [(row['userId'], row['doctorId']) for row in rows] == [(doctor.id, doctor.doctor_profile.id)]
    rows = client_for(doctor).get('/api/conversations').data
    assert [(row['userId'], row['patientId']) for row in rows] == [(patient.id, patient.patient_profile.id)]


@pytest.mark.django_db
def test_admin_conversations_list_every_counterpart(patient, doctor, admin):
    send_message(admin, patient.id, 'account notice')
    send_message(doctor, admin.id, 'question about billing')
    rows = client_for(admin).get('/api/conversations').data
    assert {(row['userId'], row['userType']) for row in rows} == {(patient.id, 'patient'), (doctor.id, 'doctor')}


@pytest.mark.django_db
def test_start_conversation_sends_opening_message_once(patient, doctor):
    client = client_for(patient)
    r = client.post('/api/conversations', {'doctorId': doctor.doctor_profile.id}, format='json')
    assert r.status_code == 201
    assert r.data['userId'] == doctor.id
    client.post('/api/conversations', {'userId': doctor.id}, format='json')
    assert list(Message.objects.values_list('content', flat=True)) == [INITIAL_MESSAGE]


@pytest.mark.django_db
def test_only_patients_start_conversations(doctor):
    other = make_doctor(email='d2@example.com')
    r = client_for(doctor).post('/api/conversations', {'userId': other.id}, format='json')
    assert r.status_code == 403


@pytest.mark.django_db
def test_available_doctors_excludes_existing_conversations(patient, doctor):
    fresh = make_doctor(email='fresh@example.com', first='Fay')
    send_message(patient, doctor.id, 'hello')
    rows = client_for(patient).get('/api/patients/doctors/active').data
    assert [row['userId'] for row in rows] == [fresh.id]


@pytest.mark.django_db(transaction=True)
def test_inbox_socket_receives_new_messages():
    from hms.asgi import application

    patient = make_patient()
    doctor = make_doctor()

    async def scenario():
        communicator = WebsocketCommunicator(application, f"/ws/messages/?token={issue_token(doctor)}")
        connected, _ = await communicator.connect()
        assert connected
        welcome = await communicator.receive_json_from()
        await database_sync_to_async(send_message)(patient, doctor.id, 'are you there?')
        pushed = await communicator.receive_json_from()
        await communicator.disconnect()
        return welcome, pushed

    welcome, pushed = async_to_sync(scenario)()
    assert welcome == {'type': 'welcome', 'userId': doctor.id}
    assert pushed['type'] == 'message'
    assert pushed['content'] == 'are you there?'
    assert pushed['senderId'] == patient.id


@pytest.mark.django_db(transaction=True)
def test_inbox_socket_refuses_bad_token():
    from hms.asgi import application

    async def scenario():
        communicator = WebsocketCommunicator(application, "/ws/messages/?token=garbage")
        connected, _ = await communicator.connect()
        return connected

    assert async_to_sync(scenario)() is False
