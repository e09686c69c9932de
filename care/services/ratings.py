"""
Doctor ratings.  Averages are computed on read, never stored.
"""
from __future__ import annotations

import logging

from django.db import IntegrityError, transaction
from django.db.models import Avg, Count, QuerySet

from care.exceptions import AlreadyRated, AppointmentMismatch, Forbidden, InvalidRating, NotFound
from care.models import Appointment, DoctorProfile, Rating, User
from care.services.profiles import resolve_doctor_id, resolve_patient_id

logger = logging.getLogger(__name__)


def _payload(r: Rating) -> dict:
    return {
        'id': r.id,
        'patientId': r.patient_id,
        'doctorId': r.doctor_id,
        'appointmentId': r.appointment_id,
        'rating': r.rating,
        'review': r.review,
        'createdAt': r.created_at.isoformat() if r.created_at else None,
        'patientName': r.patient.user.full_name,
        'doctorName': r.doctor.display_name,
    }


def submit_rating(user: User, *, doctor_id: int | None, rating: int | None, review: str = '',
                  appointment_id: int | None = None) -> dict:
    if not doctor_id or rating is None or not 1 <= rating <= 5:
        raise InvalidRating()
    if user.role != User.ROLE_PATIENT:
        raise Forbidden('Only patients can submit ratings')
    patient_id = resolve_patient_id(user)
    if not DoctorProfile.objects.filter(pk=doctor_id).exists():
        raise NotFound('Doctor not found')

    try:
        with transaction.atomic():
            if appointment_id is not None:
                appt = (
                    Appointment.objects.select_for_update()
                    .filter(pk=appointment_id, patient_id=patient_id, doctor_id=doctor_id)
                    .first()
                )
                if appt is None:
                    raise AppointmentMismatch()
                if appt.is_rated or Rating.objects.filter(appointment_id=appt.id).exists():
                    raise AlreadyRated()
            created = Rating.objects.create(
                patient_id=patient_id,
                doctor_id=doctor_id,
                appointment_id=appointment_id,
                rating=rating,
                review=review or '',
            )
            if appointment_id is not None:
                Appointment.objects.filter(pk=appointment_id).update(is_rated=True)
    except IntegrityError as exc:
        # unique appointment_id lost to a concurrent submission
        raise AlreadyRated() from exc

    logger.info("rating %s submitted p=%s d=%s", created.id, patient_id, doctor_id)
    created = Rating.objects.select_related('patient__user', 'doctor__user').get(pk=created.pk)
    return _payload(created)


def list_ratings(user: User) -> list[dict]:
    """Patients see their own ratings, doctors the ratings about them, admins all."""
    qs = Rating.objects.select_related('patient__user', 'doctor__user').order_by('-created_at', '-id')
    if user.role == User.ROLE_PATIENT:
        qs = qs.filter(patient_id=resolve_patient_id(user))
    elif user.role == User.ROLE_DOCTOR:
        qs = qs.filter(doctor_id=resolve_doctor_id(user))
    elif user.role != User.ROLE_ADMIN:
        raise Forbidden()
    return [_payload(r) for r in qs]


def with_rating_summary(doctors: QuerySet) -> QuerySet:
    """Annotate a DoctorProfile queryset with ``avg_rating`` and ``rating_count``."""
    return doctors.annotate(avg_rating=Avg('ratings__rating'), rating_count=Count('ratings', distinct=True))


def doctor_rating_summary(doctor_id: int) -> dict:
    agg = Rating.objects.filter(doctor_id=doctor_id).aggregate(avg=Avg('rating'), count=Count('id'))
    return {
        'doctorId': doctor_id,
        'averageRating': round(float(agg['avg']), 2) if agg['avg'] is not None else None,
        'ratingCount': agg['count'],
    }
