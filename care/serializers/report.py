import bleach
from rest_framework import serializers


class ReportCreateSerializer(serializers.Serializer):
    doctorId = serializers.IntegerField(min_value=1)
    type = serializers.ChoiceField(choices=['appointment', 'message'])
    appointmentId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    issue = serializers.CharField(min_length=10, max_length=500)

    def validate_issue(self, v):
        v = bleach.clean((v or '').strip(), tags=set(), strip=True)
        if len(v) < 10:
            raise serializers.ValidationError('Issue must be at least 10 characters')
        return v


class ReportUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=['pending', 'resolved'])
    remarks = serializers.CharField(required=False, allow_blank=True, max_length=2000)

    def validate_remarks(self, v):
        return bleach.clean((v or '').strip(), tags=set(), strip=True)

