"""
Direct messages between users and the conversation list built from them.

New messages are pushed to the receiver's inbox group over the channel
layer (see ``care.realtime.consumers.InboxConsumer``).
"""
from __future__ import annotations

import logging

import bleach
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.db.models import Q

from care.exceptions import Forbidden, InvalidInput, NotFound
from care.models import DoctorProfile, Message, User

logger = logging.getLogger(__name__)

INITIAL_MESSAGE = 'Hello, I would like to start a conversation.'


def inbox_group(user_id: int) -> str:
    return f"inbox.{user_id}"


def message_payload(m: Message) -> dict:
    return {
        'id': m.id,
        'senderId': m.sender_id,
        'receiverId': m.receiver_id,
        'content': m.content,
        'isRead': m.is_read,
        'createdAt': m.created_at.isoformat(),
        'senderFirstName': m.sender.first_name,
        'senderLastName': m.sender.last_name,
        'senderUserType': m.sender.role,
        'receiverFirstName': m.receiver.first_name,
        'receiverLastName': m.receiver.last_name,
        'receiverUserType': m.receiver.role,
    }


def _push(msg: Message) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    async_to_sync(channel_layer.group_send)(
        inbox_group(msg.receiver_id),
        {"type": "inbox.message", "payload": message_payload(msg)},
    )


def send_message(sender: User, receiver_id: int | None, content: str | None) -> Message:
    content = bleach.clean((content or '').strip(), tags=set(), strip=True)
    if not receiver_id or not content:
        raise InvalidInput('Receiver ID and content are required')
    if len(content) > settings.MESSAGE_MAX_LENGTH:
        raise InvalidInput('Message is too long')
    receiver = User.objects.filter(pk=receiver_id).first()
    if receiver is None:
        raise NotFound('Receiver not found')
    if receiver.pk == sender.pk:
        raise InvalidInput('Cannot send a message to yourself')

    msg = Message.objects.create(sender=sender, receiver=receiver, content=content)
    msg.sender, msg.receiver = sender, receiver
    _push(msg)
    logger.debug("message %s %s->%s", msg.id, sender.id, receiver.id)
    return msg


def get_thread(user: User, other_user_id: int) -> list[dict]:
    """Both directions of the conversation, oldest first.

    Messages from the other user are marked read as a side effect.
    """
    messages = list(
        Message.objects.select_related('sender', 'receiver')
        .filter(
            Q(sender_id=user.pk, receiver_id=other_user_id)
            | Q(sender_id=other_user_id, receiver_id=user.pk)
        )
        .order_by('created_at', 'id')
    )
    payload = [message_payload(m) for m in messages]
    Message.objects.filter(sender_id=other_user_id, receiver_id=user.pk, is_read=False).update(is_read=True)
    return payload


def _counterpart_ids(user: User) -> set[int]:
    sent = Message.objects.filter(sender_id=user.pk).values_list('receiver_id', flat=True)
    received = Message.objects.filter(receiver_id=user.pk).values_list('sender_id', flat=True)
    return set(sent) | set(received)


def list_conversations(user: User) -> list[dict]:
    """Distinct counterparts of ``user`` restricted to the opposite role.

    Administrators have no opposite role and see every counterpart.
    """
    ids = _counterpart_ids(user)
    if user.role == User.ROLE_ADMIN:
        users = User.objects.filter(pk__in=ids).order_by('first_name', 'last_name')
        return [
            {'userId': u.id, 'firstName': u.first_name, 'lastName': u.last_name, 'userType': u.role}
            for u in users
        ]
    if user.role == User.ROLE_DOCTOR:
        users = (
            User.objects.select_related('patient_profile')
            .filter(pk__in=ids, role=User.ROLE_PATIENT, patient_profile__isnull=False)
            .order_by('first_name', 'last_name')
        )
        return [
            {
                'userId': u.id,
                'firstName': u.first_name,
                'lastName': u.last_name,
                'userType': u.role,
                'patientId': u.patient_profile.id,
            }
            for u in users
        ]
    users = (
        User.objects.select_related('doctor_profile')
        .filter(pk__in=ids, role=User.ROLE_DOCTOR, doctor_profile__isnull=False)
        .order_by('first_name', 'last_name')
    )
    return [
        {
            'userId': u.id,
            'firstName': u.first_name,
            'lastName': u.last_name,
            'userType': u.role,
            'doctorId': u.doctor_profile.id,
            'specialization': u.doctor_profile.specialization,
            'hospital': u.doctor_profile.hospital,
        }
        for u in users
    ]


def start_conversation(user: User, *, user_id: int | None = None, doctor_id: int | None = None) -> dict:
    """Open a conversation from a patient to a doctor.

    An opening message is sent when the two have never exchanged one.
    """
    if not user_id and not doctor_id:
        raise InvalidInput('Either userId or doctorId is required')
    if user.role != User.ROLE_PATIENT:
        raise Forbidden('Only patients can initiate conversations with doctors')

    doctors = DoctorProfile.objects.select_related('user')
    if user_id:
        doctor = doctors.filter(user_id=user_id).first()
    else:
        doctor = doctors.filter(pk=doctor_id, status=DoctorProfile.STATUS_ACTIVE).first()
    if doctor is None:
        raise NotFound('Doctor not found or not active')
    if doctor.user_id == user.pk:
        raise InvalidInput('Cannot start a conversation with yourself')

    exists = Message.objects.filter(
        Q(sender_id=user.pk, receiver_id=doctor.user_id) | Q(sender_id=doctor.user_id, receiver_id=user.pk)
    ).exists()
    if not exists:
        send_message(user, doctor.user_id, INITIAL_MESSAGE)

    return {
        'userId': doctor.user_id,
        'firstName': doctor.user.first_name,
        'lastName': doctor.user.last_name,
        'userType': doctor.user.role,
        'doctorId': doctor.id,
        'specialization': doctor.specialization,
        'message': 'Conversation started successfully',
    }


def available_doctors(user: User) -> list[dict]:
    """Active doctors the patient has not messaged yet."""
    if user.role != User.ROLE_PATIENT:
        raise Forbidden()
    talked_to = _counterpart_ids(user)
    doctors = (
        DoctorProfile.objects.select_related('user')
        .filter(status=DoctorProfile.STATUS_ACTIVE)
        .exclude(user_id__in=talked_to)
        .order_by('user__first_name', 'user__last_name')
    )
    return [
        {
            'userId': d.user_id,
            'doctorId': d.id,
            'firstName': d.user.first_name,
            'lastName': d.user.last_name,
            'specialization': d.specialization,
            'hospital': d.hospital,
        }
        for d in doctors
    ]
