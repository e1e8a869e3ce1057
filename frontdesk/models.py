"""
Database models for the clinic front desk.

Four entity tables (users, doctors, patients, appointments) plus the
walk-in queue.  The booking and queue invariants are enforced by
partial unique constraints so that a concurrent writer that slips past
the application level checks is still rejected by the database.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Q
from django.utils import timezone

GENDER_CHOICES = [
    ('Male', 'Male'),
    ('Female', 'Female'),
    ('Other', 'Other'),
]


class User(AbstractUser):
    """Clinic staff account.

    Only two roles exist: administrators and front-desk operators.  The
    display name is stored in ``first_name``.
    """
    ROLE_ADMIN = 'admin'
    ROLE_FRONT_DESK = 'front_desk'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_FRONT_DESK, 'Front desk'),
    ]
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_FRONT_DESK)

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Doctor(models.Model):
    name = models.CharField(max_length=255)
    specialization = models.CharField(max_length=255, db_index=True)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, blank=True)
    location = models.CharField(max_length=255, blank=True)
    # Free text such as "Mon-Fri 9AM-5PM"
    availability = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.specialization})"


class Patient(models.Model):
    name = models.CharField(max_length=255, db_index=True)
    age = models.PositiveIntegerField(null=True, blank=True)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.name


class Appointment(models.Model):
    """A booking of a patient with a doctor at an exact time.

    Two appointments of the same doctor may share a time only if at most
    one of them is still ``Booked``.
    """
    STATUS_BOOKED = 'Booked'
    STATUS_COMPLETED = 'Completed'
    STATUS_CANCELLED = 'Cancelled'
    STATUS_CHOICES = [
        (STATUS_BOOKED, 'Booked'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='appointments')
    doctor = models.ForeignKey(Doctor, on_delete=models.CASCADE, related_name='appointments')
    appointment_time = models.DateTimeField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_BOOKED, db_index=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['doctor', 'appointment_time'],
                condition=Q(status='Booked'),
                name='uniq_booked_doctor_slot',
            ),
        ]
        indexes = [
            models.Index(fields=['doctor', 'appointment_time'], name='appt_doctor_time_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.patient_id} with {self.doctor_id} @ {self.appointment_time:%F %T} ({self.status})"


class QueueEntry(models.Model):
    """A walk-in visit waiting to be seen.

    ``queue_number`` restarts at 1 every calendar day (``queue_date``).
    A patient holds at most one entry that is Waiting or With Doctor.
    """
    STATUS_WAITING = 'Waiting'
    STATUS_WITH_DOCTOR = 'With Doctor'
    STATUS_COMPLETED = 'Completed'
    STATUS_CHOICES = [
        (STATUS_WAITING, 'Waiting'),
        (STATUS_WITH_DOCTOR, 'With Doctor'),
        (STATUS_COMPLETED, 'Completed'),
    ]
    ACTIVE_STATUSES = (STATUS_WAITING, STATUS_WITH_DOCTOR)

    PRIORITY_NORMAL = 'Normal'
    PRIORITY_URGENT = 'Urgent'
    PRIORITY_CHOICES = [
        (PRIORITY_NORMAL, 'Normal'),
        (PRIORITY_URGENT, 'Urgent'),
    ]

    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='queue_entries')
    appointment = models.ForeignKey(
        Appointment, null=True, blank=True, on_delete=models.SET_NULL, related_name='queue_entries'
    )
    queue_date = models.DateField(default=timezone.localdate, db_index=True)
    queue_number = models.PositiveIntegerField()
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default=PRIORITY_NORMAL, db_index=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_WAITING, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'queue entries'
        constraints = [
            models.UniqueConstraint(
                fields=['queue_date', 'queue_number'],
                name='uniq_queue_number_per_day',
            ),
            models.UniqueConstraint(
                fields=['patient'],
                condition=Q(status__in=['Waiting', 'With Doctor']),
                name='one_active_queue_entry_per_patient',
            ),
        ]

    def __str__(self) -> str:
        return f"#{self.queue_number} on {self.queue_date} ({self.priority}, {self.status})"


class QueueEntryTransition(models.Model):
    """Records a status transition for a queue entry."""
    entry = models.ForeignKey(QueueEntry, related_name='transitions', on_delete=models.CASCADE)
    from_status = models.CharField(max_length=20, null=True, blank=True)
    to_status = models.CharField(max_length=20)
    operator = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='queue_transitions'
    )
    timestamp = models.DateTimeField(auto_now_add=True)
    reason = models.CharField(max_length=255, blank=True)

    def __str__(self) -> str:
        return f"{self.entry_id}: {self.from_status} → {self.to_status}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_created_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
