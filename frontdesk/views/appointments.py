"""
Appointment endpoints.

Creation and rescheduling go through :mod:`frontdesk.services.appointments`
so that a doctor never holds two Booked appointments at the same time.
Responses carry the patient and doctor names the front desk displays.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from frontdesk.serializers.appointment import (
    AppointmentCreateSerializer,
    AppointmentListQuerySerializer,
    AppointmentUpdateSerializer,
)
from frontdesk.services.appointments import book_appointment, delete_appointment, update_appointment

from ..models import Appointment
from ..permissions import IsClinicStaff


def _serialize(appointment: Appointment) -> dict:
    patient, doctor = appointment.patient, appointment.doctor
    return {
        'id': appointment.id,
        'patient_id': appointment.patient_id,
        'doctor_id': appointment.doctor_id,
        'appointment_time': appointment.appointment_time.isoformat(),
        'status': appointment.status,
        'notes': appointment.notes,
        'created_at': appointment.created_at.isoformat() if appointment.created_at else None,
        'updated_at': appointment.updated_at.isoformat() if appointment.updated_at else None,
        'patient_name': patient.name,
        'patient_phone': patient.phone,
        'patient_email': patient.email or None,
        'doctor_name': doctor.name,
        'doctor_specialization': doctor.specialization,
    }


def _load(pk) -> Appointment:
    return get_object_or_404(Appointment.objects.select_related('patient', 'doctor'), pk=pk)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsClinicStaff])
def appointments(request):
    """
    GET query params:
      - status: Booked | Completed | Cancelled
      - doctor_id: only this doctor's appointments
      - date: YYYY-MM-DD, appointments on that calendar day
    """
    if request.method == 'GET':
        q = AppointmentListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = Appointment.objects.select_related('patient', 'doctor')
        if q.validated_data.get('status'):
            qs = qs.filter(status=q.validated_data['status'])
        if q.validated_data.get('doctor_id'):
            qs = qs.filter(doctor_id=q.validated_data['doctor_id'])
        if q.validated_data.get('date'):
            qs = qs.filter(appointment_time__date=q.validated_data['date'])
        return Response([_serialize(a) for a in qs.order_by('appointment_time', 'id')])
    # POST
    s = AppointmentCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appointment = book_appointment(
        patient_id=s.validated_data['patient_id'],
        doctor_id=s.validated_data['doctor_id'],
        appointment_time=s.validated_data['appointment_time'],
        notes=s.validated_data.get('notes') or '',
    )
    return Response(
        {'ok': True, 'message': 'Appointment created successfully', 'appointment': _serialize(_load(appointment.id))},
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsClinicStaff])
def appointment_detail(request, pk: int):
    appointment = _load(pk)
    if request.method == 'GET':
        return Response(_serialize(appointment))
    if request.method == 'PUT':
        s = AppointmentUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        update_appointment(
            appointment,
            appointment_time=s.validated_data.get('appointment_time'),
            status=s.validated_data.get('status'),
            notes=s.validated_data.get('notes'),
        )
        return Response({'ok': True, 'message': 'Appointment updated successfully', 'appointment': _serialize(appointment)})
    # DELETE
    delete_appointment(appointment, operator=request.user)
    return Response({'ok': True, 'message': 'Appointment deleted successfully'})
