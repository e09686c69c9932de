"""
Medical records.

A doctor may only write a record for a patient with whom they have a
completed appointment.  The proving appointment rows are locked while
the record is inserted so the proof cannot be withdrawn underneath the
write.
"""
from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import Max
from django.utils import timezone

from care.exceptions import AppointmentMismatch, Forbidden, PatientNotFound
from care.models import Appointment, MedicalRecord, PatientProfile, User
from care.services.audit import log_action
from care.services.profiles import (
    DoctorId,
    PatientId,
    age_from_dob,
    condition_names,
    parse_medical_history,
    resolve_doctor_id,
    resolve_patient_id,
)

logger = logging.getLogger(__name__)

NO_COMPLETED_APPOINTMENT = 'You can only add records for patients with whom you have completed appointments'


def _completed(doctor_id: DoctorId, patient_id: PatientId):
    return Appointment.objects.filter(
        doctor_id=doctor_id, patient_id=patient_id, status=Appointment.STATUS_COMPLETED,
    )


def has_completed_appointment(doctor_id: DoctorId, patient_id: PatientId) -> bool:
    return _completed(doctor_id, patient_id).exists()


def add_medical_record(user: User, *, patient_id: int, diagnosis: str, prescription: str = '',
                       notes: str = '', appointment_id: int | None = None) -> MedicalRecord:
    doctor_id = resolve_doctor_id(user)
    if not PatientProfile.objects.filter(pk=patient_id).exists():
        raise PatientNotFound()
    patient_id = PatientId(patient_id)

    with transaction.atomic():
        proof = list(_completed(doctor_id, patient_id).select_for_update().values_list('id', flat=True))
        if not proof:
            raise Forbidden(NO_COMPLETED_APPOINTMENT, extra={'hasCompletedAppointment': False})
        if appointment_id is not None and not Appointment.objects.filter(
            pk=appointment_id, doctor_id=doctor_id, patient_id=patient_id,
        ).exists():
            raise AppointmentMismatch()

        record = MedicalRecord.objects.create(
            patient_id=patient_id,
            doctor_id=doctor_id,
            appointment_id=appointment_id,
            diagnosis=diagnosis,
            prescription=prescription or '',
            notes=notes or '',
        )

    log_action(user=user, action='medical_record_create', object_type='medical_record',
               object_id=record.id, detail={'patientId': patient_id})
    logger.info("medical record %s created p=%s d=%s", record.id, patient_id, doctor_id)
    return record


def authorize_record_access(user: User, patient_id: int) -> PatientId:
    """Check ``user`` may read the records of ``patient_id``.

    Patients see their own records, doctors those of patients they have
    completed an appointment with, administrators everything.
    """
    if user.role == User.ROLE_PATIENT:
        if resolve_patient_id(user) != patient_id:
            raise Forbidden('Access denied. Patients can only view their own records.')
    elif user.role == User.ROLE_DOCTOR:
        if not has_completed_appointment(resolve_doctor_id(user), PatientId(patient_id)):
            raise Forbidden(
                'Access denied. You can only view records for patients with whom you have completed appointments',
                extra={'hasCompletedAppointment': False},
            )
    elif user.role != User.ROLE_ADMIN:
        raise Forbidden()
    return PatientId(patient_id)


def _iso(dt) -> str | None:
    return timezone.localtime(dt).isoformat() if dt else None


def list_records(patient_id: PatientId) -> list[dict]:
    qs = (
        MedicalRecord.objects.select_related('doctor__user', 'appointment')
        .filter(patient_id=patient_id)
        .order_by('-created_at', '-id')
    )
    return [
        {
            'id': r.id,
            'patientId': r.patient_id,
            'doctorId': r.doctor_id,
            'appointmentId': r.appointment_id,
            'diagnosis': r.diagnosis,
            'prescription': r.prescription,
            'notes': r.notes,
            'createdAt': _iso(r.created_at),
            'appointmentDate': _iso(r.appointment.appointment_date) if r.appointment else None,
            'doctorFirstName': r.doctor.user.first_name,
            'doctorLastName': r.doctor.user.last_name,
            'doctorName': r.doctor.display_name,
            'specialization': r.doctor.specialization,
        }
        for r in qs
    ]


def patient_record_summary(patient_id: PatientId) -> dict:
    """Patient demographics plus medications and visit history."""
    patient = PatientProfile.objects.select_related('user').filter(pk=patient_id).first()
    if patient is None:
        raise PatientNotFound()

    prescriptions = (
        MedicalRecord.objects.select_related('doctor__user', 'appointment')
        .filter(patient_id=patient_id)
        .exclude(prescription='')
        .order_by('-appointment__appointment_date', '-created_at')
    )
    medications = [
        {
            'prescription': r.prescription,
            'date': _iso(r.appointment.appointment_date if r.appointment else r.created_at),
            'doctor': r.doctor.user.full_name,
        }
        for r in prescriptions
    ]

    visits = []
    completed = (
        Appointment.objects.select_related('doctor__user')
        .prefetch_related('medical_records')
        .filter(patient_id=patient_id, status=Appointment.STATUS_COMPLETED)
        .order_by('-appointment_date')
    )
    for appt in completed:
        record = next(iter(appt.medical_records.all()), None)
        visits.append({
            'date': _iso(appt.appointment_date),
            'reason': appt.reason or 'Consultation',
            'diagnosis': record.diagnosis if record else '',
            'doctor': appt.doctor.user.full_name,
            'notes': record.notes if record else '',
        })

    return {
        'patientId': str(patient.id),
        'name': patient.user.full_name,
        'age': age_from_dob(patient.date_of_birth) or 'Unknown',
        'gender': patient.gender or 'Not specified',
        'bloodType': patient.blood_type or 'Unknown',
        'allergies': [a.strip() for a in patient.allergies.split(',') if a.strip()],
        'medicalHistory': parse_medical_history(patient.medical_history),
        'medications': medications,
        'visits': visits,
    }


def doctor_patients(doctor_id: DoctorId) -> list[dict]:
    """Patients with at least one completed appointment with the doctor."""
    patients = (
        PatientProfile.objects.select_related('user')
        .filter(appointments__doctor_id=doctor_id, appointments__status=Appointment.STATUS_COMPLETED)
        .annotate(last_visit=Max('appointments__appointment_date'))
        .order_by('-last_visit')
        .distinct()
    )
    return [
        {
            'id': str(p.id),
            'name': p.user.full_name,
            'age': age_from_dob(p.date_of_birth) or 'Unknown',
            'gender': p.gender or 'Not specified',
            'lastVisit': timezone.localtime(p.last_visit).date().isoformat() if p.last_visit else None,
            'conditions': condition_names(p.medical_history),
        }
        for p in patients
    ]
