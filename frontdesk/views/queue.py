"""
Walk-in queue endpoints.

``GET /api/queue`` is the active view the front desk works from: every
entry that is not Completed, Urgent before Normal, then by arrival.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from frontdesk.serializers.queue import QueueEntryCreateSerializer, QueueEntryUpdateSerializer
from frontdesk.services.queue import active_queue, enqueue, remove_entry, update_entry

from ..models import QueueEntry
from ..permissions import IsClinicStaff


def _serialize(entry: QueueEntry) -> dict:
    patient = entry.patient
    return {
        'id': entry.id,
        'patient_id': entry.patient_id,
        'appointment_id': entry.appointment_id,
        'queue_number': entry.queue_number,
        'queue_date': entry.queue_date.isoformat(),
        'priority': entry.priority,
        'status': entry.status,
        'created_at': entry.created_at.isoformat() if entry.created_at else None,
        'updated_at': entry.updated_at.isoformat() if entry.updated_at else None,
        'patient_name': patient.name,
        'patient_phone': patient.phone,
        'patient_email': patient.email or None,
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsClinicStaff])
def queue(request):
    if request.method == 'GET':
        return Response([_serialize(e) for e in active_queue()])
    # POST
    s = QueueEntryCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    entry = enqueue(
        patient_id=s.validated_data['patient_id'],
        priority=s.validated_data['priority'],
        appointment_id=s.validated_data.get('appointment_id'),
        operator=request.user,
    )
    return Response(
        {'ok': True, 'message': 'Patient added to queue successfully', 'queueEntry': _serialize(entry)},
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsClinicStaff])
def queue_entry_detail(request, pk: int):
    entry = get_object_or_404(QueueEntry.objects.select_related('patient'), pk=pk)
    if request.method == 'GET':
        data = _serialize(entry)
        data['transitions'] = [
            {
                'from': t.from_status,
                'to': t.to_status,
                'operator': t.operator.username if t.operator else '',
                'timestamp': t.timestamp.isoformat(),
                'reason': t.reason,
            }
            for t in entry.transitions.select_related('operator').order_by('timestamp', 'id')
        ]
        return Response(data)
    if request.method == 'PATCH':
        s = QueueEntryUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        updated = update_entry(
            entry,
            status=s.validated_data.get('status'),
            priority=s.validated_data.get('priority'),
            operator=request.user,
            reason=s.validated_data.get('reason') or '',
        )
        return Response({'ok': True, 'message': 'Queue entry updated successfully', 'queueEntry': _serialize(updated)})
    # DELETE
    remove_entry(entry, operator=request.user)
    return Response({'ok': True, 'message': 'Patient removed from queue successfully'})
