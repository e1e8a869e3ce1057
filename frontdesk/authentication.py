"""
Authentication backends for clinic staff.

Both the DRF token (``Authorization: Token <key>``) and the SimpleJWT
access token (``Authorization: Bearer <jwt>``) are accepted.  Either way
the resolved account must carry one of the clinic roles.
"""
from __future__ import annotations

from rest_framework import authentication, exceptions
from rest_framework_simplejwt import authentication as jwt_authentication

from .models import User

CLINIC_ROLES = {role for role, _ in User.ROLE_CHOICES}


def _ensure_clinic_role(user) -> None:
    if getattr(user, 'role', None) not in CLINIC_ROLES:
        raise exceptions.AuthenticationFailed('Account has no clinic role.')


class TokenAuthentication(authentication.TokenAuthentication):
    keyword = 'Token'

    def authenticate_credentials(self, key):
        user, token = super().authenticate_credentials(key)
        _ensure_clinic_role(user)
        return user, token


class JWTAuthentication(jwt_authentication.JWTAuthentication):

    def get_user(self, validated_token):
        user = super().get_user(validated_token)
        _ensure_clinic_role(user)
        return user
