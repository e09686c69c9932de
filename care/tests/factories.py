from datetime import timedelta

from django.utils import timezone
from rest_framework.test import APIClient

from care.authentication import issue_token
from care.models import Appointment, DoctorProfile, PatientProfile, User

PASSWORD = 'Str0ng!Pass1'


def make_patient(email='pat@example.com', first='Pat', last='Smith', **profile):
    user = User.objects.create_user(username=email, email=email, password=PASSWORD,
                                    first_name=first, last_name=last, role=User.ROLE_PATIENT)
    PatientProfile.objects.create(user=user, **profile)
    return user


def make_doctor(email='doc@example.com', first='Dana', last='House', status=DoctorProfile.STATUS_ACTIVE,
                **profile):
    user = User.objects.create_user(username=email, email=email, password=PASSWORD,
                                    first_name=first, last_name=last, role=User.ROLE_DOCTOR)
    profile.setdefault('specialization', 'Cardiology')
    profile.setdefault('hospital', 'General')
    DoctorProfile.objects.create(user=user, status=status, **profile)
    return user


def make_appointment(patient_user, doctor_user, status=Appointment.STATUS_PENDING, **kw):
    kw.setdefault('appointment_date', timezone.now() + timedelta(days=1))
    kw.setdefault('reason', 'checkup')
    return Appointment.objects.create(
        patient=patient_user.patient_profile,
        doctor=doctor_user.doctor_profile,
        status=status,
        **kw,
    )


def client_for(user=None):
    client = APIClient()
    if user is not None:
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token(user)}')
    return client
