"""
Django admin registrations for the front-desk models.
"""

from django.contrib import admin

from .models import (
    User,
    Doctor,
    Patient,
    Appointment,
    QueueEntry,
    QueueEntryTransition,
    AuditEvent,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'email', 'role', 'is_staff', 'is_superuser')
    list_filter = ('role',)
    search_fields = ('username', 'email', 'first_name', 'last_name')


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'specialization', 'location', 'availability')
    list_filter = ('specialization', 'gender')
    search_fields = ('name', 'specialization', 'location')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'age', 'gender', 'phone', 'email')
    list_filter = ('gender',)
    search_fields = ('name', 'phone', 'email')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'appointment_time', 'status')
    list_filter = ('status', 'doctor')
    search_fields = ('patient__name', 'doctor__name')
    date_hierarchy = 'appointment_time'


@admin.register(QueueEntry)
class QueueEntryAdmin(admin.ModelAdmin):
    list_display = ('id', 'queue_date', 'queue_number', 'patient', 'priority', 'status')
    list_filter = ('status', 'priority', 'queue_date')
    search_fields = ('patient__name',)


@admin.register(QueueEntryTransition)
class QueueEntryTransitionAdmin(admin.ModelAdmin):
    list_display = ('entry', 'from_status', 'to_status', 'operator', 'timestamp')
    list_filter = ('to_status',)
    search_fields = ('entry__patient__name', 'operator__username')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action', 'object_type')
    search_fields = ('user__username',)
