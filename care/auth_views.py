"""
Authentication views.

This module defines the registration and login endpoints used by the
front-end plus the own-profile endpoint.  By isolating these views from
the authentication class (see ``care.authentication``) we prevent
circular imports when Django REST framework initialises authentication
classes.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle

from care.authentication import issue_token
from care.serializers.auth import LoginSerializer, ProfileUpdateSerializer, registration_serializer_for
from care.services.accounts import get_profile, login_user, register_user, update_profile


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


class RegisterRateThrottle(AnonRateThrottle):
    scope = 'register'


# ---------------------------------------------------------------------
# Registration (patient or doctor; admins are seeded, never registered)
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([RegisterRateThrottle])
def register_view(request):
    """
    Create a user and its role profile.
    Accepts the common fields firstName, lastName, email, password,
    phone and userType, plus the role specific ones:
      - patient: dateOfBirth, address, medicalHistory
      - doctor: specialization, licenseNumber, hospital, experience, education
    """
    s = registration_serializer_for(request.data)
    s.is_valid(raise_exception=True)
    user = register_user(s.validated_data)
    return Response({
        'message': 'Registration successful',
        'token': issue_token(user),
        'userType': user.role,
        'userId': user.id,
    }, status=status.HTTP_201_CREATED)


# ---------------------------------------------------------------------
# Email/password login
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    """
    Login with email and password.  Doctors are refused until an
    administrator has approved them.
    """
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    payload = login_user(vd['email'], vd['password'], ip=request.META.get('REMOTE_ADDR'))
    return Response(payload, status=200)


# ---------------------------------------------------------------------
# Own profile
# ---------------------------------------------------------------------
@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def profile_view(request):
    if request.method == 'GET':
        return Response(get_profile(request.user))
    s = ProfileUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    profile = update_profile(request.user, s.validated_data)
    return Response({'message': 'Profile updated successfully', **profile})
