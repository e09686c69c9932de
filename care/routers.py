"""
URL mappings for the hospital backend API.

Paths mirror the ones the single page front-end calls.  Trailing
slashes are deliberately omitted (``APPEND_SLASH`` is off).
"""
from django.urls import include, path

from .auth_views import login_view, profile_view, register_view
from .views import admin, appointments, community, doctors, health, messages, ratings, records, reports

urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz),

    # Authentication and own profile
    path('api/register', register_view),
    path('api/login', login_view),
    path('api/profile', profile_view),

    # Appointments
    path('api/appointmentBook', appointments.appointment_book),
    path('api/appointments', appointments.appointment_list),
    path('api/appointments/unrated', appointments.appointment_unrated),
    path('api/appointments/<int:appointment_id>/status', appointments.appointment_update_status),
    path('api/appointmentRecord', appointments.appointment_unrecorded),

    # Medical records
    path('api/medicalrecords', records.medical_record_create),
    path('api/medicalrecords/<int:patient_id>', records.medical_record_list),
    path('api/prescription', records.prescription_list),
    path('api/doctors/<int:patient_id>/records', records.patient_records_summary),
    path('api/patients/<int:patient_id>/records', records.patient_records_summary),
    path('api/patients/records', records.own_records_summary),
    path('api/doctor/patients', records.doctor_patient_list),
    path('api/doctor/potential-patients', records.doctor_patient_list),
    path('api/doctor/check-patient/<int:patient_id>', records.doctor_check_patient),

    # Ratings
    path('api/ratings', ratings.ratings),

    # Messaging
    path('api/messages', messages.message_send),
    path('api/messages/<int:other_user_id>', messages.message_thread),
    path('api/conversations', messages.conversations),
    path('api/patients/doctors/active', messages.messageable_doctors),

    # Doctors directory
    path('api/doctors/active', doctors.active_doctors),
    path('api/doctors/search', doctors.search_doctors),

    # Community
    path('api/community/posts', community.community_posts),
    path('api/community/posts/<int:post_id>', community.community_post_detail),

    # Reports
    path('api/reports', reports.report_create),
    path('api/patient/reports', reports.patient_reports),

    # Administration
    path('api/admin/users', admin.admin_users),
    path('api/admin/doctors', admin.admin_doctors),
    path('api/admin/patients', admin.admin_patients),
    path('api/admin/pending-doctors', admin.admin_pending_doctors),
    path('api/admin/stats', admin.admin_stats),
    path('api/admin/status', admin.admin_user_status),
    path('api/admin/doctors/<int:doctor_id>/status', admin.admin_doctor_status),
    path('api/admin/community/posts', community.admin_community_posts),
    path('api/admin/community/posts/<int:post_id>', community.admin_community_post_delete),
    path('api/admin/reports', reports.admin_reports),
    path('api/admin/reports/<int:report_id>', reports.admin_report_update),
]
