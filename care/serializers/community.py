import bleach
from rest_framework import serializers


class CommunityPostSerializer(serializers.Serializer):
    title = serializers.CharField(min_length=3, max_length=100)
    content = serializers.CharField(min_length=10)
    flair = serializers.ChoiceField(choices=['Informative', 'Humor', 'General'], default='General')
    anonymous = serializers.BooleanField(default=False)

    def validate_title(self, v):
        v = bleach.clean((v or '').strip(), tags=set(), strip=True)
        if len(v) < 3:
            raise serializers.ValidationError('Title must be at least 3 characters')
        return v

    def validate_content(self, v):
        v = bleach.clean((v or '').strip(), tags=set(), strip=True)
        if len(v) < 10:
            raise serializers.ValidationError('Content must be at least 10 characters')
        return v
