"""
Django admin registrations for the care models.

Only minimal configuration is applied; it lets superusers inspect the
data through ``/admin/`` during development.
"""

from django.contrib import admin

from .models import (
    Appointment,
    AppointmentTransition,
    AuditEvent,
    CommunityPost,
    DoctorProfile,
    DoctorReport,
    MedicalRecord,
    Message,
    PatientProfile,
    Rating,
    User,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'first_name', 'last_name', 'role', 'is_staff', 'date_joined')
    list_filter = ('role',)
    search_fields = ('email', 'first_name', 'last_name')


@admin.register(PatientProfile)
class PatientProfileAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'gender', 'blood_type', 'date_of_birth')
    search_fields = ('user__email', 'user__first_name', 'user__last_name')


@admin.register(DoctorProfile)
class DoctorProfileAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'specialization', 'hospital', 'status', 'created_at')
    list_filter = ('status', 'specialization')
    search_fields = ('user__email', 'user__last_name', 'license_number')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'appointment_date', 'status', 'is_rated')
    list_filter = ('status',)
    search_fields = ('id', 'reason')


@admin.register(AppointmentTransition)
class AppointmentTransitionAdmin(admin.ModelAdmin):
    list_display = ('appointment', 'from_status', 'to_status', 'operator', 'timestamp')
    list_filter = ('to_status',)
    search_fields = ('appointment__id', 'operator__email')


@admin.register(MedicalRecord)
class MedicalRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'appointment', 'created_at')
    search_fields = ('diagnosis',)


@admin.register(Rating)
class RatingAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'rating', 'created_at')
    list_filter = ('rating',)


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ('id', 'sender', 'receiver', 'is_read', 'created_at')
    search_fields = ('sender__email', 'receiver__email')


@admin.register(CommunityPost)
class CommunityPostAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'patient', 'flair', 'anonymous', 'created_at')
    list_filter = ('flair',)
    search_fields = ('title',)


@admin.register(DoctorReport)
class DoctorReportAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'report_type', 'status', 'created_at')
    list_filter = ('status', 'report_type')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'action', 'object_type', 'object_id', 'created_at')
    list_filter = ('action',)
