from rest_framework import serializers


class MessageSendSerializer(serializers.Serializer):
    receiverId = serializers.IntegerField(min_value=1)
    content = serializers.CharField(max_length=2000)


class ConversationStartSerializer(serializers.Serializer):
    userId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    doctorId = serializers.IntegerField(min_value=1, required=False, allow_null=True)

    def validate(self, attrs):
        if not attrs.get('userId') and not attrs.get('doctorId'):
            raise serializers.ValidationError('Either userId or doctorId is required')
        return attrs
