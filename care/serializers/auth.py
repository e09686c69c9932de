import bleach
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers


def _clean(v):
    return bleach.clean((v or '').strip(), tags=set(), strip=True)


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField()
    password = serializers.CharField()

    def validate_email(self, v):
        v = (v or '').strip().lower()
        if not v:
            raise serializers.ValidationError('Email is required')
        return v

    def validate_password(self, v):
        if not v:
            raise serializers.ValidationError('Password is required')
        return v


class _BaseRegistrationSerializer(serializers.Serializer):
    firstName = serializers.CharField(max_length=150)
    lastName = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    userType = serializers.ChoiceField(choices=['patient', 'doctor'])

    def validate_firstName(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('First name is required')
        return v

    def validate_lastName(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('Last name is required')
        return v

    def validate_email(self, v):
        return v.strip().lower()

    def validate_phone(self, v):
        return _clean(v)

    def validate_password(self, v):
        try:
            validate_password(v)
        except DjangoValidationError as e:
            raise serializers.ValidationError(e.messages)
        return v


class PatientRegistrationSerializer(_BaseRegistrationSerializer):
    dateOfBirth = serializers.DateField(required=False, allow_null=True)
    address = serializers.CharField(required=False, allow_blank=True)
    medicalHistory = serializers.CharField(required=False, allow_blank=True)

    def validate_address(self, v):
        return _clean(v)


class DoctorRegistrationSerializer(_BaseRegistrationSerializer):
    specialization = serializers.CharField(max_length=255, required=False, allow_blank=True)
    licenseNumber = serializers.CharField(max_length=50, required=False, allow_blank=True)
    hospital = serializers.CharField(max_length=255, required=False, allow_blank=True)
    experience = serializers.IntegerField(min_value=0, required=False, default=0)
    education = serializers.CharField(required=False, allow_blank=True)


REGISTRATION_SERIALIZERS = {
    'patient': PatientRegistrationSerializer,
    'doctor': DoctorRegistrationSerializer,
}


def registration_serializer_for(data):
    """Pick the registration serializer matching ``userType``.

    Unknown or missing user types (including ``admin``) fall back to the
    patient serializer, whose ``userType`` choice field then rejects them.
    """
    user_type = data.get('userType') if hasattr(data, 'get') else None
    klass = REGISTRATION_SERIALIZERS.get(user_type, PatientRegistrationSerializer)
    return klass(data=data)


class ProfileUpdateSerializer(serializers.Serializer):
    """Own profile update; role specific keys are ignored for the other role."""
    firstName = serializers.CharField(max_length=150, required=False)
    lastName = serializers.CharField(max_length=150, required=False)
    email = serializers.EmailField(required=False)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    gender = serializers.CharField(max_length=20, required=False, allow_blank=True)
    # patient
    dateOfBirth = serializers.DateField(required=False, allow_null=True)
    address = serializers.CharField(required=False, allow_blank=True)
    medicalHistory = serializers.CharField(required=False, allow_blank=True)
    bloodType = serializers.CharField(max_length=5, required=False, allow_blank=True)
    allergies = serializers.CharField(required=False, allow_blank=True)
    # doctor
    specialization = serializers.CharField(max_length=255, required=False, allow_blank=True)
    licenseNumber = serializers.CharField(max_length=50, required=False, allow_blank=True)
    hospital = serializers.CharField(max_length=255, required=False, allow_blank=True)
    experience = serializers.IntegerField(min_value=0, required=False)
    education = serializers.CharField(required=False, allow_blank=True)

    def validate_firstName(self, v):
        return _clean(v)

    def validate_lastName(self, v):
        return _clean(v)

    def validate_email(self, v):
        return v.strip().lower()
