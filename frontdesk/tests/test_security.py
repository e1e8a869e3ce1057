import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from frontdesk.auth_views import LoginRateThrottle
from frontdesk.models import AuditEvent, User

pytestmark = pytest.mark.django_db


def login(client, **payload):
    return client.post(reverse('login'), payload, format='json')


def test_login_by_email_returns_jwt_and_legacy_token(front_desk_user):
    client = APIClient()
    r = login(client, email='DESK1@clinic.com', password='P@ssw0rd1')
    assert r.status_code == 200
    assert r.data['ok'] is True
    assert r.data['token']
    assert r.data['jwt_access'] and r.data['jwt_refresh']
    assert r.data['user']['role'] == 'front_desk'


def test_login_by_username(admin_user):
    r = login(APIClient(), username='admin1', password='P@ssw0rd1')
    assert r.status_code == 200
    assert r.data['role'] == 'admin'


def test_bad_password_is_rejected_and_audited(front_desk_user):
    r = login(APIClient(), email='desk1@clinic.com', password='wrong')
    assert r.status_code == 400
    assert r.data['error']['message'] == 'Invalid credentials'
    event = AuditEvent.objects.get(action='login')
    assert event.detail['result'] == 'fail'
    assert event.user is None


def test_login_requires_an_account():
    r = login(APIClient(), password='whatever')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'validation_error'


def test_no_role_bypass_in_login(front_desk_user):
    r = login(APIClient(), username='desk1', password='P@ssw0rd1', role='admin')
    assert r.status_code == 200
    front_desk_user.refresh_from_db()
    assert front_desk_user.role == User.ROLE_FRONT_DESK


def test_login_is_throttled(monkeypatch, front_desk_user):
    monkeypatch.setattr(LoginRateThrottle, 'THROTTLE_RATES', {'login': '2/min'})
    client = APIClient()
    for _ in range(2):
        assert login(client, username='desk1', password='wrong').status_code == 400
    r = login(client, username='desk1', password='P@ssw0rd1')
    assert r.status_code == 429
    assert r.data['error']['code'] == 'throttled'
    assert 'Retry-After' in r


def test_anonymous_requests_are_rejected():
    r = APIClient().get('/api/queue')
    assert r.status_code == 401
    assert r.data['ok'] is False


def test_token_and_bearer_headers_both_work(front_desk_user):
    data = login(APIClient(), username='desk1', password='P@ssw0rd1').data
    token_client = APIClient()
    token_client.credentials(HTTP_AUTHORIZATION=f"Token {data['token']}")
    assert token_client.get(reverse('me')).data['user']['username'] == 'desk1'
    jwt_client = APIClient()
    jwt_client.credentials(HTTP_AUTHORIZATION=f"Bearer {data['jwt_access']}")
    assert jwt_client.get('/api/doctors').status_code == 200


def test_account_without_clinic_role_is_refused(db):
    User.objects.create_user(username='visitor', password='P@ssw0rd1', role='visitor')
    data = login(APIClient(), username='visitor', password='P@ssw0rd1').data
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Token {data['token']}")
    assert client.get('/api/patients').status_code == 401


def test_refresh_and_logout(front_desk_user):
    data = login(APIClient(), username='desk1', password='P@ssw0rd1').data
    client = APIClient()
    r = client.post(reverse('jwt-refresh'), {'refresh': data['jwt_refresh']}, format='json')
    assert r.status_code == 200
    assert r.data['jwt_access']

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {data['jwt_access']}")
    r = client.post(reverse('jwt-logout'), {'refresh': data['jwt_refresh']}, format='json')
    assert r.status_code == 200
    assert r.data['blacklisted'] == 1

    r = APIClient().post(reverse('jwt-refresh'), {'refresh': data['jwt_refresh']}, format='json')
    assert r.status_code == 401


def test_front_desk_cannot_delete_doctors(api, admin_api, doctor):
    r = api.delete(f'/api/doctors/{doctor.id}')
    assert r.status_code == 403
    assert r.data['error']['code'] == 'permission_denied'
    assert admin_api.delete(f'/api/doctors/{doctor.id}').status_code == 200
