"""
Role-profile resolution and the small derived-field helpers.

Appointments, records and ratings reference profile rows, never user
ids.  Handlers turn the authenticated user into a profile id through
the resolvers here and nowhere else.
"""
from __future__ import annotations

import json
from datetime import date
from typing import NewType

from django.utils import timezone

from care.exceptions import DoctorProfileNotFound, PatientProfileNotFound
from care.models import DoctorProfile, PatientProfile, User

PatientId = NewType('PatientId', int)
DoctorId = NewType('DoctorId', int)


def resolve_patient_id(user: User) -> PatientId:
    pk = PatientProfile.objects.filter(user_id=user.pk).values_list('id', flat=True).first()
    if pk is None:
        raise PatientProfileNotFound()
    return PatientId(pk)


def resolve_doctor_id(user: User) -> DoctorId:
    pk = DoctorProfile.objects.filter(user_id=user.pk).values_list('id', flat=True).first()
    if pk is None:
        raise DoctorProfileNotFound()
    return DoctorId(pk)


def age_from_dob(dob: date | None, today: date | None = None) -> int | None:
    """Return the age in whole years, or None without a date of birth."""
    if not dob:
        return None
    today = today or timezone.localdate()
    years = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        years -= 1
    return years


def parse_medical_history(text: str | None) -> list:
    """Turn the free-text history column into a list of condition dicts.

    A JSON list is returned as-is, a JSON object becomes a one element
    list, and anything else is treated as comma separated condition
    names.
    """
    if not text:
        return []
    now = timezone.now().isoformat()
    try:
        parsed = json.loads(text)
    except ValueError:
        parsed = None
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict):
        return [{
            'condition': parsed.get('condition') or 'Unknown condition',
            'diagnosedDate': parsed.get('diagnosedDate') or now,
            'notes': parsed.get('notes') or '',
        }]
    return [
        {'condition': part.strip(), 'diagnosedDate': now, 'notes': ''}
        for part in text.split(',') if part.strip()
    ]


def condition_names(text: str | None) -> list[str]:
    """Short list of condition names for patient lists."""
    names = []
    for entry in parse_medical_history(text):
        if isinstance(entry, dict):
            name = entry.get('condition') or entry.get('name')
        else:
            name = str(entry)
        if name:
            names.append(str(name))
    return names or ['No conditions recorded']


def patient_snapshot(profile: PatientProfile) -> dict:
    return {
        'id': profile.id,
        'userId': profile.user_id,
        'dateOfBirth': profile.date_of_birth.isoformat() if profile.date_of_birth else None,
        'address': profile.address,
        'medicalHistory': profile.medical_history,
        'gender': profile.gender,
        'bloodType': profile.blood_type,
        'allergies': profile.allergies,
    }


def doctor_snapshot(profile: DoctorProfile) -> dict:
    return {
        'id': profile.id,
        'userId': profile.user_id,
        'specialization': profile.specialization,
        'licenseNumber': profile.license_number,
        'hospital': profile.hospital,
        'experience': profile.experience,
        'education': profile.education,
        'gender': profile.gender,
        'status': profile.status,
    }


def user_snapshot(user: User) -> dict:
    return {
        'id': user.id,
        'firstName': user.first_name,
        'lastName': user.last_name,
        'email': user.email,
        'phone': user.phone,
        'userType': user.role,
    }
