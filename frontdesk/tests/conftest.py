import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from frontdesk.models import Doctor, Patient, User


@pytest.fixture(autouse=True)
def _clear_cache():
    # Throttle counters and cached doctor lists live in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def front_desk_user(db):
    return User.objects.create_user(
        username='desk1', email='desk1@clinic.com', password='P@ssw0rd1', role=User.ROLE_FRONT_DESK,
    )


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        username='admin1', email='admin1@clinic.com', password='P@ssw0rd1', role=User.ROLE_ADMIN,
    )


@pytest.fixture
def api(front_desk_user):
    c = APIClient()
    c.force_authenticate(user=front_desk_user)
    return c


@pytest.fixture
def admin_api(admin_user):
    c = APIClient()
    c.force_authenticate(user=admin_user)
    return c


@pytest.fixture
def doctor(db):
    return Doctor.objects.create(
        name='Dr. Sarah Johnson', specialization='Cardiology', gender='Female',
        location='Building A, Floor 2', availability='Mon-Fri 9AM-5PM',
    )


@pytest.fixture
def other_doctor(db):
    return Doctor.objects.create(
        name='Dr. Michael Chen', specialization='Pediatrics', gender='Male',
        location='Building B, Floor 1', availability='Mon-Wed 8AM-4PM',
    )


@pytest.fixture
def patient(db):
    return Patient.objects.create(name='John Smith', age=45, gender='Male', phone='5550100101',
                                  email='john.smith@email.com')


@pytest.fixture
def other_patient(db):
    return Patient.objects.create(name='Maria Garcia', age=32, gender='Female', phone='5550100102')
