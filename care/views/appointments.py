"""
Appointment endpoints.

Patients book appointments and may cancel their own; doctors confirm,
complete or cancel the appointments booked with them.  The status graph
and ownership rules live in ``care.services.appointments``.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import IsPatientRole
from ..serializers.appointment import (
    AppointmentBookSerializer,
    AppointmentStatusSerializer,
    UnrecordedQuerySerializer,
)
from ..services.appointments import (
    appointment_payload,
    book_appointment,
    list_appointments,
    list_unrated_appointments,
    list_unrecorded_appointments,
    update_appointment_status,
)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPatientRole])
def appointment_book(request):
    """Book an appointment for the calling patient; it starts as ``pending``.

    ``appointmentDate`` is an ISO-8601 timestamp, or a date combined with
    ``appointmentTime`` given as ``HH:MM`` or ``HH:MM AM/PM``.
    """
    s = AppointmentBookSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    appt = book_appointment(
        request.user,
        doctor_id=vd['doctorId'],
        appointment_date=vd['appointmentDate'],
        appointment_time=vd.get('appointmentTime'),
        reason=vd['reason'],
        appointment_type=vd.get('appointmentType') or '',
        notes=vd.get('notes') or '',
        insurance_info=vd.get('insuranceInfo') or '',
    )
    return Response(
        {'message': 'Appointment booked successfully', 'appointment': appointment_payload(appt)},
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def appointment_list(request):
    return Response(list_appointments(request.user))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientRole])
def appointment_unrated(request):
    """Completed appointments of the calling patient that have no rating yet."""
    return Response(list_unrated_appointments(request.user))


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def appointment_update_status(request, appointment_id: int):
    s = AppointmentStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appt = update_appointment_status(
        appointment_id,
        s.validated_data['status'],
        request.user,
        notes=s.validated_data.get('notes'),
    )
    return Response(appointment_payload(appt))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def appointment_unrecorded(request):
    """Appointments of ``patientId`` in ``status`` without a medical record."""
    q = UnrecordedQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return Response(list_unrecorded_appointments(
        request.user, q.validated_data['patientId'], q.validated_data['status'],
    ))
