import bleach
from rest_framework import serializers


class RatingCreateSerializer(serializers.Serializer):
    doctorId = serializers.IntegerField(min_value=1)
    rating = serializers.IntegerField(min_value=1, max_value=5)
    review = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=2000)
    appointmentId = serializers.IntegerField(min_value=1, required=False, allow_null=True)

    def validate_review(self, v):
        return bleach.clean((v or '').strip(), tags=set(), strip=True)
