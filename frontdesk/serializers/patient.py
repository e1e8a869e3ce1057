from rest_framework import serializers

from ..models import GENDER_CHOICES
from .fields import CleanCharField


class PatientSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255, min_length=2,
                          error_messages={'min_length': 'Name must be at least 2 characters'})
    phone = CleanCharField(max_length=32, min_length=10,
                           error_messages={'min_length': 'Valid phone number required'})
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    age = serializers.IntegerField(required=False, allow_null=True, min_value=0, max_value=150)
    gender = serializers.ChoiceField(choices=GENDER_CHOICES, required=False, allow_blank=True)

    def validate_email(self, v):
        return (v or '').strip().lower()


class PatientListQuerySerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True, max_length=64)
