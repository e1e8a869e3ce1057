from rest_framework import serializers


class LoginSerializer(serializers.Serializer):
    """Accepts either ``email`` or ``username`` together with ``password``."""
    email = serializers.CharField(required=False, allow_blank=True)
    username = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField(trim_whitespace=False)

    def validate(self, attrs):
        account = (attrs.get('email') or attrs.get('username') or '').strip()
        if not account:
            raise serializers.ValidationError('Email or username is required')
        attrs['account'] = account
        return attrs
