"""
Custom permission classes for role based access control.

Each class answers 403 ``forbidden`` when the authenticated user's role
does not match.  Anonymous requests are rejected earlier by
``IsAuthenticated`` with 401.
"""
from rest_framework.permissions import BasePermission

from .models import User


class _RolePermission(BasePermission):
    role: str = ''
    message = 'Access denied.'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) == self.role)


class IsPatientRole(_RolePermission):
    """Allow access only to users with the patient role."""
    role = User.ROLE_PATIENT
    message = 'Access denied. Patients only.'


class IsDoctorRole(_RolePermission):
    """Allow access only to users with the doctor role."""
    role = User.ROLE_DOCTOR
    message = 'Access denied. Doctors only.'


class IsAdminRole(_RolePermission):
    """Allow access only to administrators."""
    role = User.ROLE_ADMIN
    message = 'Access denied. Admin only.'
