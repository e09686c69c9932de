"""
Database models for the hospital management backend.

These models capture the core concepts of the system: user accounts
with a role, the patient and doctor profiles hanging off them,
appointments with their status history, medical records, ratings,
direct messages, community posts and reports about doctors.  JSON
payloads use the camelCase keys the front-end expects; the fields here
follow Python naming.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Custom user model with a role.

    Roles mirror the front-end user types: 'patient', 'doctor' and
    'admin'.  The role is fixed at registration.  ``username`` mirrors
    the email so Django's auth machinery keeps working, while logins
    are always looked up by email.
    """
    ROLE_PATIENT = 'patient'
    ROLE_DOCTOR = 'doctor'
    ROLE_ADMIN = 'admin'
    ROLE_CHOICES = [
        (ROLE_PATIENT, 'Patient'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_ADMIN, 'Administrator'),
    ]
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=20, blank=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)

    def save(self, *args, **kwargs):
        if self.email and not self.username:
            self.username = self.email
        super().save(*args, **kwargs)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"


class PatientProfile(models.Model):
    """Patient specific information kept apart from the User row."""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='patient_profile')
    date_of_birth = models.DateField(null=True, blank=True)
    address = models.TextField(blank=True)
    # Free text; either JSON or a comma separated list of conditions
    medical_history = models.TextField(blank=True)
    gender = models.CharField(max_length=20, blank=True)
    blood_type = models.CharField(max_length=5, blank=True)
    allergies = models.TextField(blank=True)

    def __str__(self) -> str:
        return f"Patient {self.pk} ({self.user.email})"


class DoctorProfile(models.Model):
    """Doctor specific information.

    New doctors start as ``pending`` and cannot log in until an
    administrator moves them to ``active``.
    """
    STATUS_PENDING = 'pending'
    STATUS_ACTIVE = 'active'
    STATUS_INACTIVE = 'inactive'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_ACTIVE, 'Active'),
        (STATUS_INACTIVE, 'Inactive'),
    ]
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='doctor_profile')
    specialization = models.CharField(max_length=255, blank=True)
    license_number = models.CharField(max_length=50, blank=True)
    hospital = models.CharField(max_length=255, blank=True)
    experience = models.PositiveIntegerField(default=0)
    education = models.TextField(blank=True)
    gender = models.CharField(max_length=20, blank=True)
    # Directory and admin listings filter on status
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    @property
    def display_name(self) -> str:
        return f"Dr. {self.user.full_name}"

    def __str__(self) -> str:
        return f"Doctor {self.pk} ({self.user.email}, {self.status})"


class Appointment(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_SCHEDULED = 'scheduled'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_SCHEDULED, 'Scheduled'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]
    patient = models.ForeignKey(PatientProfile, on_delete=models.CASCADE, related_name='appointments')
    doctor = models.ForeignKey(DoctorProfile, on_delete=models.CASCADE, related_name='appointments')
    appointment_date = models.DateTimeField()
    appointment_type = models.CharField(max_length=50, blank=True)
    reason = models.TextField()
    insurance_info = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    notes = models.TextField(blank=True)
    is_rated = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['doctor', 'patient', 'status'], name='care_appoin_doctor__5a1b2c_idx'),
            models.Index(fields=['appointment_date'], name='care_appoin_appoint_7d3e4f_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(status__in=['pending', 'scheduled', 'completed', 'cancelled']),
                name='appointment_status_valid',
            ),
        ]

    def __str__(self) -> str:
        return f"Appointment {self.pk} p={self.patient_id} d={self.doctor_id} ({self.status})"


class AppointmentTransition(models.Model):
    """Records a status transition for an appointment."""
    appointment = models.ForeignKey(Appointment, related_name='transitions', on_delete=models.CASCADE)
    from_status = models.CharField(max_length=10)
    to_status = models.CharField(max_length=10)
    operator = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='appointment_transitions'
    )
    timestamp = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.appointment_id}: {self.from_status} → {self.to_status}"


class MedicalRecord(models.Model):
    """A diagnosis written by a doctor.  Append-only through the API."""
    patient = models.ForeignKey(PatientProfile, on_delete=models.CASCADE, related_name='medical_records')
    doctor = models.ForeignKey(DoctorProfile, on_delete=models.CASCADE, related_name='medical_records')
    appointment = models.ForeignKey(
        Appointment, null=True, blank=True, on_delete=models.SET_NULL, related_name='medical_records'
    )
    diagnosis = models.TextField()
    prescription = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"Record {self.pk} p={self.patient_id} d={self.doctor_id}"


class Rating(models.Model):
    patient = models.ForeignKey(PatientProfile, on_delete=models.CASCADE, related_name='ratings')
    doctor = models.ForeignKey(DoctorProfile, on_delete=models.CASCADE, related_name='ratings')
    # At most one rating per appointment
    appointment = models.OneToOneField(
        Appointment, null=True, blank=True, on_delete=models.SET_NULL, related_name='rating'
    )
    rating = models.PositiveSmallIntegerField()
    review = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=models.Q(rating__gte=1) & models.Q(rating__lte=5),
                name='rating_between_1_and_5',
            ),
        ]

    def __str__(self) -> str:
        return f"Rating {self.rating} for d={self.doctor_id} by p={self.patient_id}"


class Message(models.Model):
    sender = models.ForeignKey(User, on_delete=models.CASCADE, related_name='sent_messages')
    receiver = models.ForeignKey(User, on_delete=models.CASCADE, related_name='received_messages')
    content = models.TextField()
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['sender', 'receiver', 'created_at'], name='care_messag_sender__9c8b7a_idx'),
            models.Index(fields=['receiver', 'is_read'], name='care_messag_receive_6f5e4d_idx'),
        ]

    def __str__(self) -> str:
        return f"msg {self.pk} {self.sender_id}->{self.receiver_id}"


class CommunityPost(models.Model):
    """A post on the patient community board."""
    FLAIR_CHOICES = [
        ('Informative', 'Informative'),
        ('Humor', 'Humor'),
        ('General', 'General'),
    ]
    patient = models.ForeignKey(PatientProfile, on_delete=models.CASCADE, related_name='community_posts')
    title = models.CharField(max_length=100)
    content = models.TextField()
    flair = models.CharField(max_length=20, choices=FLAIR_CHOICES, default='General')
    anonymous = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.title} (#{self.pk})"


class DoctorReport(models.Model):
    """A complaint filed by a patient about a doctor, reviewed by admins."""
    TYPE_CHOICES = [
        ('appointment', 'Appointment'),
        ('message', 'Message'),
    ]
    STATUS_PENDING = 'pending'
    STATUS_RESOLVED = 'resolved'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_RESOLVED, 'Resolved'),
    ]
    patient = models.ForeignKey(PatientProfile, on_delete=models.CASCADE, related_name='reports')
    doctor = models.ForeignKey(DoctorProfile, on_delete=models.CASCADE, related_name='reports')
    appointment = models.ForeignKey(
        Appointment, null=True, blank=True, on_delete=models.SET_NULL, related_name='reports'
    )
    report_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    issue = models.TextField()
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    remarks = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Report {self.pk} on d={self.doctor_id} ({self.status})"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='care_audite_action_3a2b1c_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='care_audite_object__4d5e6f_idx'),
        ]
