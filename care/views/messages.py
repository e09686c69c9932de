"""
Direct messaging endpoints.

Messages are stored per sender/receiver pair; the conversation list is
derived from them.  New messages are also pushed to the receiver's
open inbox socket, see ``care.realtime.consumers``.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import IsPatientRole
from ..serializers.message import ConversationStartSerializer, MessageSendSerializer
from ..services.messaging import (
    available_doctors,
    get_thread,
    list_conversations,
    send_message,
    start_conversation,
)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def message_send(request):
    s = MessageSendSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    msg = send_message(request.user, s.validated_data['receiverId'], s.validated_data['content'])
    return Response({'message': 'Message sent successfully', 'id': msg.id}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def message_thread(request, other_user_id: int):
    """Messages exchanged with ``other_user_id``, oldest first; incoming ones are marked read."""
    return Response(get_thread(request.user, other_user_id))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def conversations(request):
    if request.method == 'GET':
        return Response(list_conversations(request.user))

    s = ConversationStartSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    started = start_conversation(
        request.user,
        user_id=s.validated_data.get('userId'),
        doctor_id=s.validated_data.get('doctorId'),
    )
    return Response(started, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientRole])
def messageable_doctors(request):
    return Response(available_doctors(request.user))
