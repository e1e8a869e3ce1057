from datetime import datetime, timezone as dt_timezone

import pytest
from django.db import IntegrityError, transaction

from frontdesk.exceptions import BookingConflict, ClinicError, ReferenceNotFound
from frontdesk.models import Appointment, Doctor
from frontdesk.services import appointments as appointment_service
from frontdesk.services.appointments import book_appointment, has_conflict, update_appointment
from frontdesk.services.doctors import delete_doctor

pytestmark = pytest.mark.django_db

SLOT = datetime(2030, 1, 15, 10, 0, tzinfo=dt_timezone.utc)
LATER = datetime(2030, 1, 15, 11, 0, tzinfo=dt_timezone.utc)


def test_no_conflict_on_empty_slot(doctor):
    assert has_conflict(doctor.id, SLOT) is False


def test_booked_appointment_blocks_slot(doctor, patient):
    booked = book_appointment(patient_id=patient.id, doctor_id=doctor.id, appointment_time=SLOT)
    assert has_conflict(doctor.id, SLOT) is True
    assert has_conflict(doctor.id, SLOT, exclude_id=booked.id) is False
    assert has_conflict(doctor.id, LATER) is False


def test_other_doctor_same_time_is_free(doctor, other_doctor, patient):
    book_appointment(patient_id=patient.id, doctor_id=doctor.id, appointment_time=SLOT)
    assert book_appointment(patient_id=patient.id, doctor_id=other_doctor.id, appointment_time=SLOT).id


def test_double_booking_rejected(doctor, patient, other_patient):
    book_appointment(patient_id=patient.id, doctor_id=doctor.id, appointment_time=SLOT)
    with pytest.raises(BookingConflict):
        book_appointment(patient_id=other_patient.id, doctor_id=doctor.id, appointment_time=SLOT)
    assert Appointment.objects.filter(doctor=doctor, appointment_time=SLOT).count() == 1


@pytest.mark.parametrize('status', [Appointment.STATUS_CANCELLED, Appointment.STATUS_COMPLETED])
def test_inactive_appointment_frees_slot(doctor, patient, other_patient, status):
    first = book_appointment(patient_id=patient.id, doctor_id=doctor.id, appointment_time=SLOT)
    update_appointment(first, status=status)
    rebooked = book_appointment(patient_id=other_patient.id, doctor_id=doctor.id, appointment_time=SLOT)
    assert rebooked.status == Appointment.STATUS_BOOKED
    assert Appointment.objects.filter(doctor=doctor, appointment_time=SLOT).count() == 2


def test_missing_references(doctor, patient):
    with pytest.raises(ReferenceNotFound, match='Patient not found'):
        book_appointment(patient_id=9999, doctor_id=doctor.id, appointment_time=SLOT)
    with pytest.raises(ReferenceNotFound, match='Doctor not found'):
        book_appointment(patient_id=patient.id, doctor_id=9999, appointment_time=SLOT)


def test_reschedule_into_taken_slot_rejected(doctor, patient, other_patient):
    book_appointment(patient_id=patient.id, doctor_id=doctor.id, appointment_time=SLOT)
    moving = book_appointment(patient_id=other_patient.id, doctor_id=doctor.id, appointment_time=LATER)
    with pytest.raises(BookingConflict):
        update_appointment(moving, appointment_time=SLOT)
    moving.refresh_from_db()
    assert moving.appointment_time == LATER


def test_update_same_time_is_not_a_conflict_with_itself(doctor, patient):
    appt = book_appointment(patient_id=patient.id, doctor_id=doctor.id, appointment_time=SLOT)
    updated = update_appointment(appt, appointment_time=SLOT, notes='Bring previous ECG')
    assert updated.notes == 'Bring previous ECG'


def test_reactivating_cancelled_appointment_checks_slot(doctor, patient, other_patient):
    cancelled = book_appointment(patient_id=patient.id, doctor_id=doctor.id, appointment_time=SLOT)
    update_appointment(cancelled, status=Appointment.STATUS_CANCELLED)
    book_appointment(patient_id=other_patient.id, doctor_id=doctor.id, appointment_time=SLOT)
    with pytest.raises(BookingConflict):
        update_appointment(cancelled, status=Appointment.STATUS_BOOKED)
    cancelled.refresh_from_db()
    assert cancelled.status == Appointment.STATUS_CANCELLED


def test_update_requires_a_field(doctor, patient):
    appt = book_appointment(patient_id=patient.id, doctor_id=doctor.id, appointment_time=SLOT)
    with pytest.raises(ClinicError, match='No valid fields to update'):
        update_appointment(appt)


def test_constraint_catches_race(monkeypatch, doctor, patient, other_patient):
    book_appointment(patient_id=patient.id, doctor_id=doctor.id, appointment_time=SLOT)
    # Simulate a concurrent writer that slipped past the check
    monkeypatch.setattr(appointment_service, 'has_conflict', lambda *a, **kw: False)
    with pytest.raises(BookingConflict):
        book_appointment(patient_id=other_patient.id, doctor_id=doctor.id, appointment_time=SLOT)
    assert Appointment.objects.filter(doctor=doctor, status=Appointment.STATUS_BOOKED).count() == 1


def test_other_integrity_errors_are_not_reported_as_conflicts(monkeypatch, doctor, patient):
    def fail(**kwargs):
        raise IntegrityError('FOREIGN KEY constraint failed')

    monkeypatch.setattr(Appointment.objects, 'create', fail)
    with pytest.raises(IntegrityError):
        book_appointment(patient_id=patient.id, doctor_id=doctor.id, appointment_time=SLOT)


def test_update_integrity_error_without_slot_collision_propagates(monkeypatch, doctor, patient):
    appt = book_appointment(patient_id=patient.id, doctor_id=doctor.id, appointment_time=SLOT)

    def fail(self, *args, **kwargs):
        raise IntegrityError('FOREIGN KEY constraint failed')

    monkeypatch.setattr(Appointment, 'save', fail)
    with pytest.raises(IntegrityError):
        update_appointment(appt, appointment_time=LATER)


@pytest.mark.django_db(transaction=True)
def test_booking_and_doctor_delete_lock_the_doctor_row(monkeypatch, doctor, patient):
    locks = []
    select_for_update = Doctor.objects.select_for_update

    def spy(*args, **kwargs):
        locks.append(transaction.get_connection().in_atomic_block)
        return select_for_update(*args, **kwargs)

    monkeypatch.setattr(Doctor.objects, 'select_for_update', spy)
    stale = Doctor.objects.get(id=doctor.id)
    booked = book_appointment(patient_id=patient.id, doctor_id=doctor.id, appointment_time=SLOT)
    with pytest.raises(ClinicError, match='Cannot delete doctor with active appointments'):
        delete_doctor(stale)
    assert locks == [True, True]

    update_appointment(booked, status=Appointment.STATUS_CANCELLED)
    delete_doctor(stale)
    assert not Doctor.objects.filter(id=doctor.id).exists()
    assert not Appointment.objects.filter(id=booked.id).exists()


# ---------------------------------------------------------------------------
# HTTP layer
# ---------------------------------------------------------------------------

def test_create_and_list_appointments(api, doctor, patient):
    r = api.post('/api/appointments', {
        'patient_id': patient.id,
        'doctor_id': doctor.id,
        'appointment_time': '2030-01-15T10:00:00Z',
        'notes': '<b>First visit</b>',
    }, format='json')
    assert r.status_code == 201
    assert r.data['ok'] is True
    assert r.data['appointment']['status'] == 'Booked'
    assert r.data['appointment']['notes'] == 'First visit'
    assert r.data['appointment']['doctor_name'] == doctor.name

    r = api.get('/api/appointments', {'doctor_id': doctor.id, 'date': '2030-01-15'})
    assert r.status_code == 200
    assert [a['patient_name'] for a in r.data] == [patient.name]


def test_conflict_returns_400(api, doctor, patient, other_patient):
    payload = {'patient_id': patient.id, 'doctor_id': doctor.id, 'appointment_time': '2030-01-15T10:00:00Z'}
    assert api.post('/api/appointments', payload, format='json').status_code == 201
    payload['patient_id'] = other_patient.id
    r = api.post('/api/appointments', payload, format='json')
    assert r.status_code == 400
    assert r.data['ok'] is False
    assert r.data['error']['code'] == 'booking_conflict'
    assert r.data['error']['message'] == 'Doctor already has an appointment at this time'


def test_cancel_via_put_then_rebook(api, doctor, patient, other_patient):
    payload = {'patient_id': patient.id, 'doctor_id': doctor.id, 'appointment_time': '2030-01-15T10:00:00Z'}
    first = api.post('/api/appointments', payload, format='json').data['appointment']
    r = api.put(f"/api/appointments/{first['id']}", {'status': 'Cancelled'}, format='json')
    assert r.status_code == 200
    assert r.data['appointment']['status'] == 'Cancelled'
    payload['patient_id'] = other_patient.id
    assert api.post('/api/appointments', payload, format='json').status_code == 201


def test_invalid_payload_returns_validation_error(api, doctor):
    r = api.post('/api/appointments', {'doctor_id': doctor.id, 'appointment_time': 'tomorrow'}, format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'validation_error'
    assert r.data['error']['message']['patient_id'] == 'Valid patient ID required'
    assert r.data['error']['message']['appointment_time'] == 'Valid datetime required'


def test_delete_appointment(api, doctor, patient):
    appt = book_appointment(patient_id=patient.id, doctor_id=doctor.id, appointment_time=SLOT)
    r = api.delete(f'/api/appointments/{appt.id}')
    assert r.status_code == 200
    assert not Appointment.objects.filter(id=appt.id).exists()
    assert api.get(f'/api/appointments/{appt.id}').status_code == 404


def test_notes_keep_text_and_drop_markup(api, doctor, patient):
    r = api.post('/api/appointments', {
        'patient_id': patient.id,
        'doctor_id': doctor.id,
        'appointment_time': '2030-01-15T10:00:00Z',
        'notes': '<script>alert(1)</script>BP < 140 & <i>fasting</i>',
    }, format='json')
    assert r.status_code == 201
    assert r.data['appointment']['notes'] == 'alert(1)BP < 140 & fasting'
    assert Appointment.objects.get().notes == 'alert(1)BP < 140 & fasting'


def test_date_only_appointment_time_means_midnight(api, doctor, patient):
    r = api.post('/api/appointments', {
        'patient_id': patient.id,
        'doctor_id': doctor.id,
        'appointment_time': '2030-01-15',
    }, format='json')
    assert r.status_code == 201
    assert r.data['appointment']['appointment_time'].startswith('2030-01-15T00:00:00')
