"""
Appointment booking and lifecycle.

Statuses move along a fixed graph::

    pending   -> scheduled | cancelled
    scheduled -> completed | cancelled

``completed`` and ``cancelled`` are terminal.  Patients may only cancel
their own appointments; doctors may only touch appointments booked with
them; administrators bypass ownership but not the graph.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, time

from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime, parse_time

from care.exceptions import Forbidden, InvalidInput, InvalidTransition, NotFound
from care.models import Appointment, AppointmentTransition, DoctorProfile, User
from care.services.audit import log_action
from care.services.profiles import resolve_doctor_id, resolve_patient_id

logger = logging.getLogger(__name__)

_TRANSITIONS = {
    Appointment.STATUS_PENDING: [Appointment.STATUS_SCHEDULED, Appointment.STATUS_CANCELLED],
    Appointment.STATUS_SCHEDULED: [Appointment.STATUS_COMPLETED, Appointment.STATUS_CANCELLED],
    Appointment.STATUS_COMPLETED: [],
    Appointment.STATUS_CANCELLED: [],
}
STATUSES = tuple(_TRANSITIONS)

_TWELVE_HOUR = re.compile(r'^\s*(\d{1,2}):(\d{2})\s*(AM|PM)\s*$', re.IGNORECASE)


def _can_transition(current: str, new: str) -> bool:
    """Return True if an appointment may move from ``current`` to ``new``."""
    return new in _TRANSITIONS.get(current, [])


def _parse_time(value: str) -> time:
    m = _TWELVE_HOUR.match(value)
    if m:
        hours, minutes, period = int(m.group(1)), int(m.group(2)), m.group(3).upper()
        if not (1 <= hours <= 12) or minutes > 59:
            raise InvalidInput('Invalid appointment time')
        if period == 'PM' and hours < 12:
            hours += 12
        if period == 'AM' and hours == 12:
            hours = 0
        return time(hours, minutes)
    try:
        parsed = parse_time(value.strip())
    except ValueError:
        parsed = None
    if parsed is None:
        raise InvalidInput('Invalid appointment time')
    return parsed


def parse_appointment_datetime(date_value: str | None, time_value: str | None = None) -> datetime:
    """Return an aware datetime for the booking request.

    ``date_value`` may be a full ISO-8601 timestamp, in which case
    ``time_value`` is optional.  Otherwise it is a ``YYYY-MM-DD`` date and
    ``time_value`` is ``HH:MM[:SS]`` or the 12-hour ``HH:MM AM/PM`` form.
    """
    date_value = (date_value or '').strip()
    time_value = (time_value or '').strip()
    if not date_value:
        raise InvalidInput('Appointment date and time are required')

    try:
        full = parse_datetime(date_value.replace('Z', '+00:00'))
    except ValueError:
        full = None
    # A bare date parses as midnight; it still needs an explicit time
    if full is not None and not time_value and len(date_value) > 10:
        dt = full
    else:
        try:
            day = parse_date(date_value[:10])
        except ValueError:
            day = None
        if day is None:
            raise InvalidInput('Invalid appointment date')
        if not time_value:
            raise InvalidInput('Appointment date and time are required')
        dt = datetime.combine(day, _parse_time(time_value))

    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt)
    return dt


def appointment_payload(appt: Appointment) -> dict:
    local = timezone.localtime(appt.appointment_date)
    return {
        'id': appt.id,
        'patientId': appt.patient_id,
        'doctorId': appt.doctor_id,
        'appointmentDate': local.isoformat(),
        'appointmentTime': local.strftime('%H:%M'),
        'appointmentType': appt.appointment_type,
        'reason': appt.reason,
        'notes': appt.notes,
        'insuranceInfo': appt.insurance_info,
        'status': appt.status,
        'isRated': appt.is_rated,
    }


def book_appointment(user: User, *, doctor_id: int, appointment_date: str, appointment_time: str | None,
                     reason: str, appointment_type: str = '', notes: str = '',
                     insurance_info: str = '') -> Appointment:
    patient_id = resolve_patient_id(user)
    if not (reason or '').strip():
        raise InvalidInput('Appointment reason is required')
    when = parse_appointment_datetime(appointment_date, appointment_time)
    doctor = DoctorProfile.objects.filter(pk=doctor_id, status=DoctorProfile.STATUS_ACTIVE).first()
    if doctor is None:
        raise NotFound('Doctor not found')

    appt = Appointment.objects.create(
        patient_id=patient_id,
        doctor=doctor,
        appointment_date=when,
        appointment_type=appointment_type or '',
        reason=reason.strip(),
        notes=notes or '',
        insurance_info=insurance_info or '',
        status=Appointment.STATUS_PENDING,
    )
    logger.info("appointment %s booked p=%s d=%s", appt.id, patient_id, doctor.id)
    return appt


def update_appointment_status(appointment_id: int, new_status: str, user: User,
                              notes: str | None = None) -> Appointment:
    """Move an appointment along the status graph on behalf of ``user``.

    The row is locked for the duration of the check and write, and a
    history row is recorded for every change.
    """
    if new_status not in STATUSES:
        raise InvalidInput('Invalid status value')

    with transaction.atomic():
        appt = (
            Appointment.objects.select_for_update()
            .filter(pk=appointment_id)
            .first()
        )
        if appt is None:
            raise NotFound('Appointment not found')

        if user.role == User.ROLE_PATIENT:
            if appt.patient_id != resolve_patient_id(user):
                raise Forbidden('You can only update your own appointments')
            if new_status != Appointment.STATUS_CANCELLED:
                raise Forbidden('Patients can only cancel appointments')
        elif user.role == User.ROLE_DOCTOR:
            if appt.doctor_id != resolve_doctor_id(user):
                raise Forbidden('You can only update your own appointments')
        elif user.role != User.ROLE_ADMIN:
            raise Forbidden()

        old_status = appt.status
        if not _can_transition(old_status, new_status):
            raise InvalidTransition(f'Cannot change status from {old_status} to {new_status}')

        appt.status = new_status
        fields = ['status']
        if notes is not None:
            appt.notes = notes
            fields.append('notes')
        appt.save(update_fields=fields)
        AppointmentTransition.objects.create(
            appointment=appt, from_status=old_status, to_status=new_status, operator=user,
        )

    log_action(user=user, action='appointment_status', object_type='appointment', object_id=appt.id,
               detail={'from': old_status, 'to': new_status})
    logger.info("appointment %s: %s -> %s by user %s", appt.id, old_status, new_status, user.id)
    return appt


def _listing_row(appt: Appointment, *, with_doctor: bool, with_patient: bool) -> dict:
    local = timezone.localtime(appt.appointment_date)
    row = {
        'id': appt.id,
        'date': local.isoformat(),
        'time': local.strftime('%I:%M %p'),
    }
    if with_doctor:
        row['doctorId'] = appt.doctor_id
        row['doctorName'] = appt.doctor.display_name
        row['specialization'] = appt.doctor.specialization
    if with_patient:
        row['patientId'] = appt.patient_id
        row['patientName'] = appt.patient.user.full_name
    row.update({
        'reason': appt.reason,
        'notes': appt.notes,
        'insuranceInfo': appt.insurance_info,
        'status': appt.status,
        'type': appt.appointment_type,
        'isRated': appt.is_rated,
    })
    return row


def list_appointments(user: User) -> list[dict]:
    """Appointments visible to ``user``, newest first."""
    qs = Appointment.objects.select_related('doctor__user', 'patient__user').order_by('-appointment_date')
    if user.role == User.ROLE_PATIENT:
        qs = qs.filter(patient_id=resolve_patient_id(user))
        return [_listing_row(a, with_doctor=True, with_patient=False) for a in qs]
    if user.role == User.ROLE_DOCTOR:
        qs = qs.filter(doctor_id=resolve_doctor_id(user))
        return [_listing_row(a, with_doctor=False, with_patient=True) for a in qs]
    return [_listing_row(a, with_doctor=True, with_patient=True) for a in qs]


def list_unrated_appointments(user: User) -> list[dict]:
    patient_id = resolve_patient_id(user)
    qs = (
        Appointment.objects.select_related('doctor__user')
        .filter(patient_id=patient_id, status=Appointment.STATUS_COMPLETED, is_rated=False,
                rating__isnull=True)
        .order_by('-appointment_date')
    )
    return [
        {
            'id': a.id,
            'doctorId': a.doctor_id,
            'doctorName': a.doctor.display_name,
            'date': timezone.localtime(a.appointment_date).isoformat(),
            'status': a.status,
            'isRated': False,
        }
        for a in qs
    ]


def list_unrecorded_appointments(user: User, patient_id: int, status: str) -> list[dict]:
    """Appointments of a patient in ``status`` that have no medical record yet."""
    if status not in STATUSES:
        raise InvalidInput('Invalid status value')
    qs = (
        Appointment.objects.select_related('doctor__user')
        .filter(patient_id=patient_id, status=status, medical_records__isnull=True)
        .order_by('-appointment_date')
    )
    if user.role == User.ROLE_PATIENT:
        if resolve_patient_id(user) != patient_id:
            raise Forbidden('Patients can only view their own appointments')
    elif user.role == User.ROLE_DOCTOR:
        qs = qs.filter(doctor_id=resolve_doctor_id(user))
    return [
        {
            'id': a.id,
            'doctorId': a.doctor_id,
            'doctorName': a.doctor.display_name,
            'date': timezone.localtime(a.appointment_date).isoformat(),
            'status': a.status,
            'type': a.appointment_type,
            'isRated': a.is_rated,
        }
        for a in qs
    ]
