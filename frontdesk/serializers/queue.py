from rest_framework import serializers

from ..models import QueueEntry


class QueueEntryCreateSerializer(serializers.Serializer):
    patient_id = serializers.IntegerField(min_value=1, error_messages={
        'required': 'Valid patient ID required',
        'invalid': 'Valid patient ID required',
        'min_value': 'Valid patient ID required',
    })
    priority = serializers.ChoiceField(
        choices=QueueEntry.PRIORITY_CHOICES,
        default=QueueEntry.PRIORITY_NORMAL,
        error_messages={'invalid_choice': 'Valid priority required'},
    )
    appointment_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)


class QueueEntryUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=QueueEntry.STATUS_CHOICES, required=False, error_messages={
        'invalid_choice': 'Valid status required',
    })
    priority = serializers.ChoiceField(choices=QueueEntry.PRIORITY_CHOICES, required=False, error_messages={
        'invalid_choice': 'Valid priority required',
    })
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)
