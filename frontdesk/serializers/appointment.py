from rest_framework import serializers

from ..models import Appointment
from .fields import CleanCharField

# ISO-8601 datetimes, or a bare date meaning midnight in TIME_ZONE
APPOINTMENT_TIME_FORMATS = ['iso-8601', '%Y-%m-%d']


class AppointmentCreateSerializer(serializers.Serializer):
    patient_id = serializers.IntegerField(min_value=1, error_messages={
        'required': 'Valid patient ID required',
        'invalid': 'Valid patient ID required',
        'min_value': 'Valid patient ID required',
    })
    doctor_id = serializers.IntegerField(min_value=1, error_messages={
        'required': 'Valid doctor ID required',
        'invalid': 'Valid doctor ID required',
        'min_value': 'Valid doctor ID required',
    })
    appointment_time = serializers.DateTimeField(input_formats=APPOINTMENT_TIME_FORMATS, error_messages={
        'required': 'Valid datetime required',
        'invalid': 'Valid datetime required',
    })
    notes = CleanCharField(required=False, allow_blank=True, max_length=2000)


class AppointmentUpdateSerializer(serializers.Serializer):
    appointment_time = serializers.DateTimeField(required=False, input_formats=APPOINTMENT_TIME_FORMATS, error_messages={
        'invalid': 'Valid datetime required',
    })
    status = serializers.ChoiceField(choices=Appointment.STATUS_CHOICES, required=False, error_messages={
        'invalid_choice': 'Valid status required',
    })
    notes = CleanCharField(required=False, allow_blank=True, max_length=2000)


class AppointmentListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Appointment.STATUS_CHOICES, required=False)
    doctor_id = serializers.IntegerField(min_value=1, required=False)
    date = serializers.DateField(required=False)
