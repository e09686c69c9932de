"""
Patient reports about doctors and their review by administrators.
"""
from __future__ import annotations

import logging

from django.utils import timezone

from care.exceptions import AppointmentMismatch, NotFound
from care.models import Appointment, DoctorProfile, DoctorReport, User
from care.services.audit import log_action
from care.services.profiles import resolve_patient_id

logger = logging.getLogger(__name__)


def report_payload(r: DoctorReport) -> dict:
    appt = r.appointment
    return {
        'id': r.id,
        'patientId': r.patient_id,
        'doctorId': r.doctor_id,
        'patientName': r.patient.user.full_name,
        'doctorName': r.doctor.display_name,
        'type': r.report_type,
        'appointmentId': r.appointment_id,
        'appointmentDate': timezone.localtime(appt.appointment_date).isoformat() if appt else None,
        'reason': appt.reason if appt else None,
        'issue': r.issue,
        'status': r.status,
        'remarks': r.remarks,
        'createdAt': r.created_at.isoformat(),
    }


def _reports():
    return DoctorReport.objects.select_related('patient__user', 'doctor__user', 'appointment')


def submit_report(user: User, data: dict) -> dict:
    patient_id = resolve_patient_id(user)
    doctor_id = data['doctorId']
    if not DoctorProfile.objects.filter(pk=doctor_id).exists():
        raise NotFound('Doctor not found')
    appointment_id = data.get('appointmentId')
    if appointment_id is not None and not Appointment.objects.filter(
        pk=appointment_id, patient_id=patient_id, doctor_id=doctor_id,
    ).exists():
        raise AppointmentMismatch()

    report = DoctorReport.objects.create(
        patient_id=patient_id,
        doctor_id=doctor_id,
        appointment_id=appointment_id,
        report_type=data['type'],
        issue=data['issue'],
    )
    logger.info("report %s filed p=%s d=%s", report.id, patient_id, doctor_id)
    return report_payload(_reports().get(pk=report.pk))


def list_patient_reports(user: User) -> list[dict]:
    patient_id = resolve_patient_id(user)
    return [report_payload(r) for r in _reports().filter(patient_id=patient_id).order_by('-created_at', '-id')]


def list_all_reports() -> list[dict]:
    return [report_payload(r) for r in _reports().order_by('-created_at', '-id')]


def update_report(user: User, report_id: int, status: str, remarks: str | None = None) -> dict:
    report = _reports().filter(pk=report_id).first()
    if report is None:
        raise NotFound('Report not found')
    old_status = report.status
    report.status = status
    if remarks is not None:
        report.remarks = remarks
    report.save(update_fields=['status', 'remarks', 'updated_at'])
    log_action(user=user, action='report_update', object_type='doctor_report', object_id=report.id,
               detail={'from': old_status, 'to': status})
    logger.info("report %s: %s -> %s by admin %s", report.id, old_status, status, user.id)
    return report_payload(report)
