import logging
from typing import Optional

from django.conf import settings
from django.core.cache import cache
from django.db import transaction

from frontdesk.exceptions import ClinicError
from frontdesk.models import Appointment, Doctor
from frontdesk.services.appointments import lock_doctor
from frontdesk.services.audit import log_action

logger = logging.getLogger(__name__)

CACHE_VERSION_KEY = 'doctors:version'


def serialize_doctor(doctor: Doctor) -> dict:
    return {
        'id': doctor.id,
        'name': doctor.name,
        'specialization': doctor.specialization,
        'gender': doctor.gender,
        'location': doctor.location,
        'availability': doctor.availability,
        'created_at': doctor.created_at.isoformat() if doctor.created_at else None,
    }


def list_doctors(*, specialization: Optional[str] = None, location: Optional[str] = None,
                 availability: Optional[str] = None) -> list[dict]:
    qs = Doctor.objects.all()
    if specialization:
        qs = qs.filter(specialization__icontains=specialization)
    if location:
        qs = qs.filter(location__icontains=location)
    if availability:
        qs = qs.filter(availability__icontains=availability)
    return [serialize_doctor(d) for d in qs.order_by('name', 'id')]


def _cache_version() -> int:
    return cache.get_or_set(CACHE_VERSION_KEY, 1, None)


def cached_doctor_list(*, specialization: Optional[str] = None, location: Optional[str] = None,
                       availability: Optional[str] = None) -> list[dict]:
    key = f"doctors:v={_cache_version()}:s={specialization or ''}:l={location or ''}:a={availability or ''}"
    data = cache.get(key)
    if data is None:
        data = list_doctors(specialization=specialization, location=location, availability=availability)
        cache.set(key, data, settings.DOCTOR_CACHE_SECONDS)
    return data


def invalidate_doctor_cache() -> None:
    """Orphan every cached doctor list by moving to a new key version."""
    try:
        cache.incr(CACHE_VERSION_KEY)
    except ValueError:
        cache.set(CACHE_VERSION_KEY, 2, None)


def delete_doctor(doctor: Doctor, *, operator=None) -> None:
    """Delete a doctor that has no Booked appointments.

    The doctor row is locked before the check, the same lock bookings take.
    """
    doctor_id, name = doctor.id, doctor.name
    with transaction.atomic():
        locked = lock_doctor(doctor_id)
        if locked.appointments.filter(status=Appointment.STATUS_BOOKED).exists():
            raise ClinicError('Cannot delete doctor with active appointments')
        locked.delete()
        log_action(user=operator, action='doctor_delete', object_type='doctor',
                   object_id=doctor_id, detail={'name': name})
    invalidate_doctor_cache()
    logger.info('Deleted doctor %s (%s)', doctor_id, name)
