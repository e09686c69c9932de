"""
Medical record endpoints.

Doctors write records only for patients they have completed an
appointment with; the same rule gates doctors reading a patient's
history.  Patients read their own records and prescriptions.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import IsDoctorRole, IsPatientRole
from ..serializers.record import MedicalRecordCreateSerializer
from ..services.profiles import PatientId, resolve_doctor_id, resolve_patient_id
from ..services.records import (
    add_medical_record,
    authorize_record_access,
    doctor_patients,
    has_completed_appointment,
    list_records,
    patient_record_summary,
)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def medical_record_create(request):
    s = MedicalRecordCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    record = add_medical_record(
        request.user,
        patient_id=vd['patientId'],
        diagnosis=vd['diagnosis'],
        prescription=vd.get('prescription') or '',
        notes=vd.get('notes') or '',
        appointment_id=vd.get('appointmentId'),
    )
    return Response(
        {'message': 'Medical record created successfully', 'recordId': record.id},
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def medical_record_list(request, patient_id: int):
    return Response(list_records(authorize_record_access(request.user, patient_id)))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientRole])
def prescription_list(request):
    """The calling patient's own records, prescriptions included."""
    return Response(list_records(resolve_patient_id(request.user)))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def patient_records_summary(request, patient_id: int):
    """Record summary of one patient; served for both record routes."""
    return Response(patient_record_summary(authorize_record_access(request.user, patient_id)))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientRole])
def own_records_summary(request):
    return Response(patient_record_summary(resolve_patient_id(request.user)))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def doctor_patient_list(request):
    """Patients with at least one completed appointment with the calling doctor."""
    return Response(doctor_patients(resolve_doctor_id(request.user)))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def doctor_check_patient(request, patient_id: int):
    return Response({
        'hasCompletedAppointment': has_completed_appointment(resolve_doctor_id(request.user), PatientId(patient_id)),
    })
