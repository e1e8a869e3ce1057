"""
Doctor directory endpoints.

Front-desk staff list, create and edit doctors; only administrators may
delete them.  List responses are cached per filter combination and the
cache is invalidated on every write.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from frontdesk.serializers.doctor import DoctorListQuerySerializer, DoctorSerializer
from frontdesk.services.doctors import (
    cached_doctor_list,
    delete_doctor,
    invalidate_doctor_cache,
    serialize_doctor,
)

from ..models import Doctor, User
from ..permissions import IsClinicStaff


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsClinicStaff])
def doctors(request):
    """
    GET query params:
      - specialization, location, availability: optional substring filters
    """
    if request.method == 'GET':
        q = DoctorListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        return Response(cached_doctor_list(
            specialization=(q.validated_data.get('specialization') or '').strip() or None,
            location=(q.validated_data.get('location') or '').strip() or None,
            availability=(q.validated_data.get('availability') or '').strip() or None,
        ))
    # POST
    s = DoctorSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    doctor = Doctor.objects.create(**s.validated_data)
    invalidate_doctor_cache()
    return Response(
        {'ok': True, 'message': 'Doctor created successfully', 'doctor': serialize_doctor(doctor)},
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsClinicStaff])
def doctor_detail(request, pk: int):
    doctor = get_object_or_404(Doctor, pk=pk)
    if request.method == 'GET':
        return Response(serialize_doctor(doctor))
    if request.method == 'PUT':
        s = DoctorSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        for field, value in s.validated_data.items():
            setattr(doctor, field, value)
        doctor.save()
        invalidate_doctor_cache()
        return Response({'ok': True, 'message': 'Doctor updated successfully', 'doctor': serialize_doctor(doctor)})
    # DELETE
    if request.user.role != User.ROLE_ADMIN:
        raise PermissionDenied('Only administrators can delete doctors')
    delete_doctor(doctor, operator=request.user)
    return Response({'ok': True, 'message': 'Doctor deleted successfully'})
