"""
Account lifecycle: registration, login, own-profile updates and the
seeded administrator.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.db import IntegrityError, transaction

from care.authentication import issue_token
from care.exceptions import DuplicateEmail, InvalidCredentials, PendingApproval
from care.models import DoctorProfile, PatientProfile, User
from care.services.audit import log_action
from care.services.profiles import doctor_snapshot, patient_snapshot, user_snapshot
from care.services.ratings import doctor_rating_summary

logger = logging.getLogger(__name__)


def register_user(data: dict) -> User:
    """Create the user and its role profile in one transaction.

    ``data`` is the validated payload of a patient or doctor
    registration serializer.
    """
    email = data['email']
    if User.objects.filter(email__iexact=email).exists():
        raise DuplicateEmail()
    role = data['userType']
    try:
        with transaction.atomic():
            user = User(
                username=email,
                email=email,
                first_name=data['firstName'],
                last_name=data['lastName'],
                phone=data.get('phone') or '',
                role=role,
            )
            user.set_password(data['password'])
            user.save()
            if role == User.ROLE_DOCTOR:
                DoctorProfile.objects.create(
                    user=user,
                    specialization=data.get('specialization') or '',
                    license_number=data.get('licenseNumber') or '',
                    hospital=data.get('hospital') or '',
                    experience=data.get('experience') or 0,
                    education=data.get('education') or '',
                )
            else:
                PatientProfile.objects.create(
                    user=user,
                    date_of_birth=data.get('dateOfBirth'),
                    address=data.get('address') or '',
                    medical_history=data.get('medicalHistory') or '',
                )
    except IntegrityError as exc:
        # Lost a race against a concurrent registration of the same email
        raise DuplicateEmail() from exc

    log_action(user=user, action='register', object_type='user', object_id=user.id,
               detail={'role': role})
    logger.info("registered %s user id=%s", role, user.id)
    return user


def role_profile_snapshot(user: User) -> dict | None:
    if user.role == User.ROLE_PATIENT:
        profile = PatientProfile.objects.filter(user=user).first()
        return patient_snapshot(profile) if profile else None
    if user.role == User.ROLE_DOCTOR:
        profile = DoctorProfile.objects.filter(user=user).first()
        return doctor_snapshot(profile) if profile else None
    return None


def login_user(email: str, password: str, ip: str | None = None) -> dict:
    """Check credentials and return the login payload."""
    user = User.objects.filter(email__iexact=email).first()
    if user is None or not user.is_active or not user.check_password(password):
        log_action(user=user, action='login', object_type='user', object_id=getattr(user, 'id', None),
                   detail={'result': 'fail', 'email': email, 'ip': ip})
        logger.info("login failed for %s", email)
        raise InvalidCredentials()

    if user.role == User.ROLE_DOCTOR:
        status = DoctorProfile.objects.filter(user=user).values_list('status', flat=True).first()
        if status != DoctorProfile.STATUS_ACTIVE:
            logger.info("login refused for doctor id=%s with status %s", user.id, status)
            raise PendingApproval()

    log_action(user=user, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': ip})
    logger.info("login ok user id=%s", user.id)
    return {
        'token': issue_token(user),
        'userType': user.role,
        'userId': user.id,
        'userData': role_profile_snapshot(user) or user_snapshot(user),
    }


def get_profile(user: User) -> dict:
    payload: dict = {'user': user_snapshot(user)}
    if user.role == User.ROLE_PATIENT:
        profile = PatientProfile.objects.filter(user=user).first()
        if profile:
            payload['patient'] = patient_snapshot(profile)
    elif user.role == User.ROLE_DOCTOR:
        profile = DoctorProfile.objects.filter(user=user).first()
        if profile:
            payload['doctor'] = {**doctor_snapshot(profile), **doctor_rating_summary(profile.id)}
    return payload


_USER_FIELDS = {'firstName': 'first_name', 'lastName': 'last_name', 'email': 'email', 'phone': 'phone'}
_PATIENT_FIELDS = {
    'dateOfBirth': 'date_of_birth', 'address': 'address', 'medicalHistory': 'medical_history',
    'gender': 'gender', 'bloodType': 'blood_type', 'allergies': 'allergies',
}
_DOCTOR_FIELDS = {
    'specialization': 'specialization', 'licenseNumber': 'license_number', 'hospital': 'hospital',
    'experience': 'experience', 'education': 'education', 'gender': 'gender',
}


def _apply(obj, mapping: dict, data: dict) -> list[str]:
    changed = []
    for key, attr in mapping.items():
        if key in data:
            setattr(obj, attr, data[key])
            changed.append(attr)
    return changed


def update_profile(user: User, data: dict) -> dict:
    """Update the user row and its role profile together."""
    new_email = data.get('email')
    if new_email and new_email != user.email and \
            User.objects.filter(email__iexact=new_email).exclude(pk=user.pk).exists():
        raise DuplicateEmail()

    with transaction.atomic():
        user = User.objects.select_for_update().get(pk=user.pk)
        changed = _apply(user, _USER_FIELDS, data)
        if 'email' in changed:
            user.username = user.email
            changed.append('username')
        if changed:
            user.save(update_fields=changed)

        if user.role == User.ROLE_PATIENT:
            profile = PatientProfile.objects.select_for_update().filter(user=user).first()
            if profile:
                fields = _apply(profile, _PATIENT_FIELDS, data)
                if fields:
                    profile.save(update_fields=fields)
        elif user.role == User.ROLE_DOCTOR:
            profile = DoctorProfile.objects.select_for_update().filter(user=user).first()
            if profile:
                fields = _apply(profile, _DOCTOR_FIELDS, data)
                if fields:
                    profile.save(update_fields=fields)

    log_action(user=user, action='profile_update', object_type='user', object_id=user.id,
               detail={'fields': sorted(k for k in data)})
    return get_profile(user)


def ensure_admin_user(email: str | None = None, password: str | None = None) -> tuple[User, bool]:
    """Create the configured administrator unless an admin already exists.

    Returns ``(user, created)``.
    """
    email = (email or settings.ADMIN_EMAIL).lower()
    password = password or settings.ADMIN_PASSWORD
    existing = User.objects.filter(role=User.ROLE_ADMIN).order_by('id').first()
    if existing:
        return existing, False
    user = User(
        username=email, email=email, first_name='Admin', last_name='User',
        role=User.ROLE_ADMIN, is_staff=True,
    )
    user.set_password(password)
    user.save()
    logger.info("seeded admin user %s", email)
    return user, True
