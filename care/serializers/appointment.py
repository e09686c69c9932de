import bleach
from rest_framework import serializers

STATUS_CHOICES = ['pending', 'scheduled', 'completed', 'cancelled']


class AppointmentBookSerializer(serializers.Serializer):
    doctorId = serializers.IntegerField(min_value=1)
    appointmentDate = serializers.CharField(max_length=40)
    appointmentTime = serializers.CharField(max_length=20, required=False, allow_blank=True)
    appointmentType = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    reason = serializers.CharField(error_messages={'required': 'Appointment reason is required',
                                                   'blank': 'Appointment reason is required'})
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    insuranceInfo = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_reason(self, v):
        v = bleach.clean((v or '').strip(), tags=set(), strip=True)
        if not v:
            raise serializers.ValidationError('Appointment reason is required')
        return v

    def validate_notes(self, v):
        return bleach.clean((v or '').strip(), tags=set(), strip=True)


class AppointmentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=STATUS_CHOICES,
                                     error_messages={'invalid_choice': 'Invalid status value'})
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate_notes(self, v):
        return bleach.clean((v or '').strip(), tags=set(), strip=True)


class UnrecordedQuerySerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)
    status = serializers.ChoiceField(choices=STATUS_CHOICES)
