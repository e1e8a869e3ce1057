"""
Appointment booking with doctor time-slot conflict detection.

A doctor can hold a single Booked appointment per exact
``appointment_time``.  Cancelled and Completed appointments never block
a slot.  The check runs in the same transaction as the write, with the
doctor row locked, and the partial unique constraint on the table
catches the race where two requests pass the check at the same time.
"""
from __future__ import annotations

import logging

from django.db import IntegrityError, transaction

from frontdesk.exceptions import BookingConflict, ClinicError, ReferenceNotFound
from frontdesk.models import Appointment, Doctor, Patient
from frontdesk.services.audit import log_action

logger = logging.getLogger(__name__)

BOOKED = Appointment.STATUS_BOOKED


def _booked_in_slot(doctor_id, appointment_time, exclude_id=None):
    qs = Appointment.objects.filter(
        doctor_id=doctor_id,
        appointment_time=appointment_time,
        status=BOOKED,
    )
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)
    return qs


def has_conflict(doctor_id, appointment_time, exclude_id=None) -> bool:
    """Return True if the doctor already has a Booked appointment at ``appointment_time``.

    ``exclude_id`` skips the appointment being updated.
    """
    return _booked_in_slot(doctor_id, appointment_time, exclude_id).exists()


def lock_doctor(doctor_id) -> Doctor:
    """Lock the doctor row until the surrounding transaction ends.

    Bookings and :func:`frontdesk.services.doctors.delete_doctor` both take
    this lock, so a booking cannot land on a doctor that is being deleted.
    """
    doctor = Doctor.objects.select_for_update().filter(id=doctor_id).first()
    if doctor is None:
        raise ReferenceNotFound('Doctor not found')
    return doctor


def _reject(doctor_id, appointment_time):
    logger.info('Booking conflict for doctor %s at %s', doctor_id, appointment_time.isoformat())
    raise BookingConflict()


def _slot_race_or_raise(exc, doctor_id, appointment_time, exclude_id=None):
    # Only the booked-slot constraint is a conflict; anything else propagates
    if not _booked_in_slot(doctor_id, appointment_time, exclude_id).exists():
        raise exc
    _reject(doctor_id, appointment_time)


def book_appointment(*, patient_id, doctor_id, appointment_time, notes='') -> Appointment:
    if not Patient.objects.filter(id=patient_id).exists():
        raise ReferenceNotFound('Patient not found')
    try:
        with transaction.atomic():
            lock_doctor(doctor_id)
            if has_conflict(doctor_id, appointment_time):
                _reject(doctor_id, appointment_time)
            appointment = Appointment.objects.create(
                patient_id=patient_id,
                doctor_id=doctor_id,
                appointment_time=appointment_time,
                notes=notes or '',
            )
    except IntegrityError as exc:
        # A concurrent request booked the slot between check and insert
        _slot_race_or_raise(exc, doctor_id, appointment_time)
    logger.info('Booked appointment %s: patient %s with doctor %s at %s',
                appointment.id, patient_id, doctor_id, appointment_time.isoformat())
    return appointment


def update_appointment(appointment: Appointment, *, appointment_time=None, status=None, notes=None) -> Appointment:
    """Reschedule, change the status of, or annotate an appointment.

    The slot is re-checked whenever the result is Booked and either the
    time moves or a Cancelled/Completed appointment is booked again.
    """
    if appointment_time is None and status is None and notes is None:
        raise ClinicError('No valid fields to update')

    old_status = appointment.status
    new_time = appointment_time if appointment_time is not None else appointment.appointment_time
    new_status = status or old_status
    time_changed = new_time != appointment.appointment_time
    reactivated = new_status == BOOKED and old_status != BOOKED
    try:
        with transaction.atomic():
            if new_status == BOOKED and (time_changed or reactivated):
                lock_doctor(appointment.doctor_id)
                if has_conflict(appointment.doctor_id, new_time, exclude_id=appointment.id):
                    _reject(appointment.doctor_id, new_time)
            appointment.appointment_time = new_time
            appointment.status = new_status
            if notes is not None:
                appointment.notes = notes
            appointment.save()
    except IntegrityError as exc:
        appointment.refresh_from_db()
        _slot_race_or_raise(exc, appointment.doctor_id, new_time, exclude_id=appointment.id)
    if old_status != new_status:
        logger.info('Appointment %s: %s -> %s', appointment.id, old_status, new_status)
    return appointment


def delete_appointment(appointment: Appointment, *, operator=None) -> None:
    detail = {
        'patient_id': appointment.patient_id,
        'doctor_id': appointment.doctor_id,
        'appointment_time': appointment.appointment_time.isoformat(),
        'status': appointment.status,
    }
    appointment_id = appointment.id
    with transaction.atomic():
        appointment.delete()
        log_action(user=operator, action='appointment_delete', object_type='appointment',
                   object_id=appointment_id, detail=detail)
    logger.info('Deleted appointment %s', appointment_id)
