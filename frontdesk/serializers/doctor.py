from rest_framework import serializers

from ..models import GENDER_CHOICES
from .fields import CleanCharField


class DoctorSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255, min_length=2,
                          error_messages={'min_length': 'Name must be at least 2 characters'})
    specialization = CleanCharField(max_length=255, min_length=2,
                                    error_messages={'min_length': 'Specialization required'})
    gender = serializers.ChoiceField(choices=GENDER_CHOICES,
                                     error_messages={'invalid_choice': 'Valid gender required'})
    location = CleanCharField(max_length=255, min_length=2,
                              error_messages={'min_length': 'Location required'})
    availability = CleanCharField(max_length=255, min_length=2,
                                  error_messages={'min_length': 'Availability required'})


class DoctorListQuerySerializer(serializers.Serializer):
    specialization = serializers.CharField(required=False, allow_blank=True, max_length=64)
    location = serializers.CharField(required=False, allow_blank=True, max_length=64)
    availability = serializers.CharField(required=False, allow_blank=True, max_length=64)
