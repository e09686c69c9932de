"""
Doctor report endpoints.  Patients file reports about a doctor, either
about an appointment or about messages; administrators resolve them.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import IsAdminRole, IsPatientRole
from ..serializers.report import ReportCreateSerializer, ReportUpdateSerializer
from ..services.reports import list_all_reports, list_patient_reports, submit_report, update_report


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPatientRole])
def report_create(request):
    s = ReportCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return Response(submit_report(request.user, s.validated_data), status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientRole])
def patient_reports(request):
    return Response(list_patient_reports(request.user))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_reports(request):
    return Response(list_all_reports())


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_report_update(request, report_id: int):
    s = ReportUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    return Response(update_report(request.user, report_id, vd['status'], vd.get('remarks')))
