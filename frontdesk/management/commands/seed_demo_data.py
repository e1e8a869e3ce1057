"""
Management command to load demo doctors, patients, appointments and queue entries.
"""
from datetime import datetime, time, timedelta

from django.core.management import call_command
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from frontdesk.models import Appointment, Doctor, Patient, QueueEntry, QueueEntryTransition
from frontdesk.services.doctors import invalidate_doctor_cache


DOCTORS = [
    ('Dr. Sarah Johnson', 'Cardiology', 'Female', 'Building A, Floor 2', 'Mon-Fri 9AM-5PM'),
    ('Dr. Michael Chen', 'Pediatrics', 'Male', 'Building B, Floor 1', 'Mon-Wed 8AM-4PM'),
    ('Dr. Emily Rodriguez', 'Dermatology', 'Female', 'Building A, Floor 3', 'Tue-Thu 10AM-6PM'),
    ('Dr. David Kumar', 'Orthopedics', 'Male', 'Building C, Floor 2', 'Mon-Fri 7AM-3PM'),
]

PATIENTS = [
    ('John Smith', 45, 'Male', '5550100101', 'john.smith@email.com'),
    ('Maria Garcia', 32, 'Female', '5550100102', 'maria.garcia@email.com'),
    ('Robert Johnson', 67, 'Male', '5550100103', 'robert.johnson@email.com'),
    ('Lisa Wang', 28, 'Female', '5550100104', 'lisa.wang@email.com'),
]

# (patient index, doctor index, day offset, hour, status)
APPOINTMENTS = [
    (0, 0, 0, 10, Appointment.STATUS_BOOKED),
    (1, 1, 0, 11, Appointment.STATUS_BOOKED),
    (2, 2, 0, 14, Appointment.STATUS_COMPLETED),
    (3, 3, 1, 9, Appointment.STATUS_BOOKED),
]

# (patient index, appointment index, status, priority)
QUEUE = [
    (0, 0, QueueEntry.STATUS_WAITING, QueueEntry.PRIORITY_NORMAL),
    (1, 1, QueueEntry.STATUS_WITH_DOCTOR, QueueEntry.PRIORITY_NORMAL),
    (3, None, QueueEntry.STATUS_WAITING, QueueEntry.PRIORITY_URGENT),
]


class Command(BaseCommand):
    help = 'Replace clinic data with a small demo data set'

    def add_arguments(self, parser):
        parser.add_argument('--with-users', action='store_true',
                            help='Also run ensure_default_users')

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Clearing existing clinic data...')
        QueueEntry.objects.all().delete()
        Appointment.objects.all().delete()
        Patient.objects.all().delete()
        Doctor.objects.all().delete()

        doctors = self.create_doctors()
        patients = self.create_patients()
        appointments = self.create_appointments(patients, doctors)
        self.create_queue(patients, appointments)
        invalidate_doctor_cache()

        if options['with_users']:
            call_command('ensure_default_users', stdout=self.stdout)

        self.stdout.write(self.style.SUCCESS('Demo data loaded.'))

    def create_doctors(self):
        doctors = []
        for name, specialization, gender, location, availability in DOCTORS:
            doctors.append(Doctor.objects.create(
                name=name,
                specialization=specialization,
                gender=gender,
                location=location,
                availability=availability,
            ))
            self.stdout.write(f'Doctor: {name}')
        return doctors

    def create_patients(self):
        patients = []
        for name, age, gender, phone, email in PATIENTS:
            patients.append(Patient.objects.create(name=name, age=age, gender=gender, phone=phone, email=email))
            self.stdout.write(f'Patient: {name}')
        return patients

    def create_appointments(self, patients, doctors):
        today = timezone.localdate()
        tz = timezone.get_current_timezone()
        appointments = []
        for p, d, offset, hour, status in APPOINTMENTS:
            when = timezone.make_aware(datetime.combine(today + timedelta(days=offset), time(hour)), tz)
            appointments.append(Appointment.objects.create(
                patient=patients[p],
                doctor=doctors[d],
                appointment_time=when,
                status=status,
            ))
            self.stdout.write(f'Appointment: {patients[p].name} with {doctors[d].name} at {when:%Y-%m-%d %H:%M}')
        return appointments

    def create_queue(self, patients, appointments):
        today = timezone.localdate()
        for number, (p, a, status, priority) in enumerate(QUEUE, start=1):
            entry = QueueEntry.objects.create(
                patient=patients[p],
                appointment=appointments[a] if a is not None else None,
                queue_date=today,
                queue_number=number,
                status=status,
                priority=priority,
            )
            QueueEntryTransition.objects.create(entry=entry, from_status=None, to_status=status,
                                                reason='Demo data')
            self.stdout.write(f'Queue #{number}: {patients[p].name} ({status}, {priority})')
