"""
Role based permission classes for clinic staff.
"""
from rest_framework.permissions import BasePermission

from .models import User

STAFF_ROLES = {User.ROLE_ADMIN, User.ROLE_FRONT_DESK}


class IsClinicStaff(BasePermission):
    """Allow access to administrators and front-desk operators."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) in STAFF_ROLES)
