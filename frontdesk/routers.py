"""
URL mappings for the clinic front-desk API.

Trailing slashes are deliberately omitted to match the client.
"""
from django.urls import path, include

from .auth_views import login_view, me_view, jwt_refresh_view, jwt_logout_view
from .views import health
from .views.appointments import appointments, appointment_detail
from .views.doctors import doctors, doctor_detail
from .views.patients import patients, patient_detail
from .views.queue import queue, queue_entry_detail


urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),
    path('api/health', health.api_health, name='api-health'),
    # Authentication
    path('api/auth/login', login_view, name='login'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt-refresh'),
    path('api/auth/logout', jwt_logout_view, name='jwt-logout'),
    path('api/auth/me', me_view, name='me'),
    # Doctors
    path('api/doctors', doctors, name='doctors'),
    path('api/doctors/<int:pk>', doctor_detail, name='doctor-detail'),
    # Patients
    path('api/patients', patients, name='patients'),
    path('api/patients/<int:pk>', patient_detail, name='patient-detail'),
    # Appointments
    path('api/appointments', appointments, name='appointments'),
    path('api/appointments/<int:pk>', appointment_detail, name='appointment-detail'),
    # Walk-in queue
    path('api/queue', queue, name='queue'),
    path('api/queue/<int:pk>', queue_entry_detail, name='queue-entry-detail'),
]
