"""
Walk-in queue sequencing.

Queue numbers restart every calendar day: a new entry gets one more than
the highest number handed out that day.  The active view (everything not
Completed) serves Urgent entries before Normal ones and, within a
priority, earlier arrivals first.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Case, IntegerField, Max, Value, When
from django.utils import timezone

from frontdesk.exceptions import (
    AlreadyQueued,
    ClinicError,
    InvalidTransition,
    QueueNumberUnavailable,
    ReferenceNotFound,
)
from frontdesk.models import Appointment, Patient, QueueEntry, QueueEntryTransition
from frontdesk.realtime.events import notify_queue_changed
from frontdesk.services.audit import log_action

logger = logging.getLogger(__name__)

WAITING = QueueEntry.STATUS_WAITING
WITH_DOCTOR = QueueEntry.STATUS_WITH_DOCTOR
COMPLETED = QueueEntry.STATUS_COMPLETED

PRIORITY_RANK = {
    QueueEntry.PRIORITY_URGENT: 0,
    QueueEntry.PRIORITY_NORMAL: 1,
}

TRANSITIONS = {
    WAITING: [WITH_DOCTOR, COMPLETED],
    WITH_DOCTOR: [WAITING, COMPLETED],
    COMPLETED: [],
}


def can_transition(current: str, new: str) -> bool:
    """Return True if a queue entry may move from ``current`` to ``new``."""
    return new in TRANSITIONS.get(current, [])


def next_queue_number(day) -> int:
    """Return the number the next entry created on ``day`` should get."""
    last = QueueEntry.objects.filter(queue_date=day).aggregate(max_number=Max('queue_number'))['max_number']
    return (last or 0) + 1


def active_queue():
    """Entries still to be served, in serving order."""
    rank = Case(
        *[When(priority=priority, then=Value(value)) for priority, value in PRIORITY_RANK.items()],
        default=Value(len(PRIORITY_RANK)),
        output_field=IntegerField(),
    )
    return (
        QueueEntry.objects.select_related('patient')
        .exclude(status=COMPLETED)
        .annotate(priority_rank=rank)
        .order_by('priority_rank', 'queue_date', 'queue_number', 'id')
    )


def _has_active_entry(patient_id) -> bool:
    return QueueEntry.objects.filter(patient_id=patient_id, status__in=QueueEntry.ACTIVE_STATUSES).exists()


def enqueue(*, patient_id, priority=QueueEntry.PRIORITY_NORMAL, appointment_id=None, operator=None) -> QueueEntry:
    """Add a patient to today's queue.

    Two requests may read the same maximum concurrently; the loser of the
    unique (queue_date, queue_number) race retries with a fresh number
    inside a savepoint, up to ``QUEUE_NUMBER_ATTEMPTS`` times.
    """
    patient = Patient.objects.filter(id=patient_id).first()
    if not patient:
        raise ReferenceNotFound('Patient not found')
    appointment = None
    if appointment_id is not None:
        appointment = Appointment.objects.filter(id=appointment_id).first()
        if not appointment:
            raise ReferenceNotFound('Appointment not found')
        if appointment.patient_id != patient.id:
            raise ClinicError('Appointment belongs to another patient')

    attempts = max(1, settings.QUEUE_NUMBER_ATTEMPTS)
    with transaction.atomic():
        if _has_active_entry(patient.id):
            raise AlreadyQueued()
        day = timezone.localdate()
        for attempt in range(1, attempts + 1):
            number = next_queue_number(day)
            try:
                with transaction.atomic():
                    entry = QueueEntry.objects.create(
                        patient=patient,
                        appointment=appointment,
                        queue_date=day,
                        queue_number=number,
                        priority=priority,
                    )
            except IntegrityError:
                if _has_active_entry(patient.id):
                    raise AlreadyQueued()
                logger.warning('Queue number %s on %s already taken (attempt %s/%s)', number, day, attempt, attempts)
                continue
            QueueEntryTransition.objects.create(
                entry=entry,
                from_status=None,
                to_status=entry.status,
                operator=operator,
                reason='Added to queue',
            )
            transaction.on_commit(lambda: notify_queue_changed('created', entry.id))
            logger.info('Queued patient %s as #%s on %s (%s)', patient.id, number, day, priority)
            return entry
    logger.error('Gave up allocating a queue number on %s after %s attempts', day, attempts)
    raise QueueNumberUnavailable()


def update_entry(entry: QueueEntry, *, status=None, priority=None, operator=None, reason='') -> QueueEntry:
    """Change the status and/or priority of a queue entry.

    Status changes must follow :data:`TRANSITIONS`; setting the current
    status again is accepted and changes nothing.
    """
    if status is None and priority is None:
        raise ClinicError('No valid fields to update')
    with transaction.atomic():
        locked = QueueEntry.objects.select_for_update().get(id=entry.id)
        old_status = locked.status
        if status is not None and status != old_status:
            if not can_transition(old_status, status):
                raise InvalidTransition(f'Cannot move queue entry from {old_status} to {status}')
            locked.status = status
        if priority is not None:
            locked.priority = priority
        locked.save()
        if locked.status != old_status:
            QueueEntryTransition.objects.create(
                entry=locked,
                from_status=old_status,
                to_status=locked.status,
                operator=operator,
                reason=reason or 'Status update',
            )
            logger.info('Queue entry %s: %s -> %s', locked.id, old_status, locked.status)
        transaction.on_commit(lambda: notify_queue_changed('updated', locked.id))
    return locked


def remove_entry(entry: QueueEntry, *, operator=None) -> None:
    entry_id = entry.id
    detail = {
        'patient_id': entry.patient_id,
        'queue_date': entry.queue_date.isoformat(),
        'queue_number': entry.queue_number,
        'status': entry.status,
    }
    with transaction.atomic():
        entry.delete()
        log_action(user=operator, action='queue_remove', object_type='queue_entry',
                   object_id=entry_id, detail=detail)
        transaction.on_commit(lambda: notify_queue_changed('removed', entry_id))
    logger.info('Removed queue entry %s', entry_id)
