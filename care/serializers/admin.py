from rest_framework import serializers


class DoctorStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=['active', 'inactive', 'pending'],
                                     error_messages={'invalid_choice': 'Invalid status value'})


class UserStatusSerializer(serializers.Serializer):
    userId = serializers.IntegerField()
    status = serializers.ChoiceField(choices=['active', 'inactive'],
                                     error_messages={'invalid_choice': 'Status must be "active" or "inactive"'})
