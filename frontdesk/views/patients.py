"""
Patient register endpoints.
"""
from __future__ import annotations

from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from frontdesk.serializers.patient import PatientListQuerySerializer, PatientSerializer

from ..models import Patient
from ..permissions import IsClinicStaff


def _serialize(patient: Patient) -> dict:
    return {
        'id': patient.id,
        'name': patient.name,
        'age': patient.age,
        'gender': patient.gender,
        'phone': patient.phone,
        'email': patient.email or None,
        'created_at': patient.created_at.isoformat() if patient.created_at else None,
    }


def _clean(validated: dict) -> dict:
    data = dict(validated)
    data['email'] = data.get('email') or ''
    data['gender'] = data.get('gender') or ''
    return data


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsClinicStaff])
def patients(request):
    """
    GET query params:
      - q: optional search over name, phone and email
    """
    if request.method == 'GET':
        q = PatientListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = Patient.objects.all()
        term = (q.validated_data.get('q') or '').strip()
        if term:
            qs = qs.filter(Q(name__icontains=term) | Q(phone__icontains=term) | Q(email__icontains=term))
        return Response([_serialize(p) for p in qs.order_by('name', 'id')])
    # POST
    s = PatientSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient = Patient.objects.create(**_clean(s.validated_data))
    return Response(
        {'ok': True, 'message': 'Patient created successfully', 'patient': _serialize(patient)},
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, IsClinicStaff])
def patient_detail(request, pk: int):
    patient = get_object_or_404(Patient, pk=pk)
    if request.method == 'GET':
        return Response(_serialize(patient))
    # PUT
    s = PatientSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    for field, value in _clean(s.validated_data).items():
        setattr(patient, field, value)
    patient.save()
    return Response({'ok': True, 'message': 'Patient updated successfully', 'patient': _serialize(patient)})
