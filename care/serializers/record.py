import bleach
from rest_framework import serializers


class MedicalRecordCreateSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)
    appointmentId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    diagnosis = serializers.CharField()
    prescription = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_diagnosis(self, v):
        v = bleach.clean((v or '').strip(), tags=set(), strip=True)
        if not v:
            raise serializers.ValidationError('Diagnosis is required')
        return v

    def validate_prescription(self, v):
        return bleach.clean((v or '').strip(), tags=set(), strip=True)

    def validate_notes(self, v):
        return bleach.clean((v or '').strip(), tags=set(), strip=True)
