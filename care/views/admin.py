"""
Administrator endpoints.

User, doctor and patient listings, the dashboard statistics and the
doctor approval switch.  Doctors register as ``pending`` and cannot log
in until an administrator sets them ``active``.
"""
from __future__ import annotations

import logging
from datetime import datetime, time, timedelta

from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..exceptions import InvalidInput, NotFound
from ..models import Appointment, DoctorProfile, PatientProfile, User
from ..permissions import IsAdminRole
from ..serializers.admin import DoctorStatusSerializer, UserStatusSerializer
from ..services.audit import log_action
from ..services.profiles import doctor_snapshot, patient_snapshot, user_snapshot

logger = logging.getLogger(__name__)


def _doctor_row(d: DoctorProfile) -> dict:
    row = {**user_snapshot(d.user), **doctor_snapshot(d)}
    row.update({'doctorId': d.id, 'userId': d.user_id, 'createdAt': d.user.date_joined.isoformat()})
    del row['id']
    return row


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_users(request):
    users = User.objects.order_by('-date_joined', '-id')
    return Response([
        {**user_snapshot(u), 'createdAt': u.date_joined.isoformat()} for u in users
    ])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_doctors(request):
    """Approved or deactivated doctors; pending applications are listed separately."""
    qs = (
        DoctorProfile.objects.select_related('user')
        .exclude(status=DoctorProfile.STATUS_PENDING)
        .order_by('-user__date_joined', '-id')
    )
    return Response([_doctor_row(d) for d in qs])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_pending_doctors(request):
    qs = (
        DoctorProfile.objects.select_related('user')
        .filter(status=DoctorProfile.STATUS_PENDING)
        .order_by('user__date_joined', 'id')
    )
    return Response([_doctor_row(d) for d in qs])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_patients(request):
    qs = PatientProfile.objects.select_related('user').order_by('-user__date_joined', '-id')
    data = []
    for p in qs:
        row = {**user_snapshot(p.user), **patient_snapshot(p)}
        row.update({'patientId': p.id, 'userId': p.user_id, 'createdAt': p.user.date_joined.isoformat()})
        del row['id']
        data.append(row)
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_stats(request):
    """Dashboard counters; "today" is the local calendar day of ``TIME_ZONE``."""
    today = timezone.localdate()
    start = timezone.make_aware(datetime.combine(today, time.min))
    end = start + timedelta(days=1)
    return Response({
        'totalPatients': User.objects.filter(role=User.ROLE_PATIENT).count(),
        'activeDoctorCount': DoctorProfile.objects.exclude(status=DoctorProfile.STATUS_PENDING).count(),
        'pendingDoctorCount': DoctorProfile.objects.filter(status=DoctorProfile.STATUS_PENDING).count(),
        'appointmentsToday': Appointment.objects.filter(
            appointment_date__gte=start, appointment_date__lt=end,
        ).count(),
    })


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_doctor_status(request, doctor_id: int):
    s = DoctorStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    new_status = s.validated_data['status']

    doctor = DoctorProfile.objects.filter(pk=doctor_id).first()
    if doctor is None:
        raise NotFound('Doctor not found')
    old_status = doctor.status
    doctor.status = new_status
    doctor.save(update_fields=['status'])

    log_action(user=request.user, action='doctor_status', object_type='doctor', object_id=doctor.id,
               detail={'from': old_status, 'to': new_status})
    logger.info("doctor %s: %s -> %s by admin %s", doctor.id, old_status, new_status, request.user.id)
    return Response({'message': f'Doctor status updated to {new_status}'})


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_user_status(request):
    """Switch an account on or off by user id.

    Doctors carry the switch on their profile status, patients on the
    account's ``is_active`` flag, which also refuses their login.
    """
    s = UserStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user_id, new_status = s.validated_data['userId'], s.validated_data['status']

    user = User.objects.filter(pk=user_id).first()
    if user is None:
        raise NotFound('User not found')
    if user.role == User.ROLE_ADMIN:
        raise InvalidInput('Administrator accounts cannot be switched off')
    if user.role == User.ROLE_DOCTOR:
        DoctorProfile.objects.filter(user=user).update(status=new_status)
    else:
        user.is_active = new_status == 'active'
        user.save(update_fields=['is_active'])

    log_action(user=request.user, action='user_status', object_type='user', object_id=user.id,
               detail={'to': new_status})
    logger.info("user %s set %s by admin %s", user.id, new_status, request.user.id)
    return Response({'message': 'User status updated successfully', 'userId': user.id, 'status': new_status})
