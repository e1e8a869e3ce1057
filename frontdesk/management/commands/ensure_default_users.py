from django.core.management.base import BaseCommand
from django.contrib.auth.hashers import make_password

from frontdesk.models import User

DEFAULT_USERS = [
    ("admin", "admin@clinic.com", "admin123", User.ROLE_ADMIN, "Admin User"),
    ("frontdesk", "frontdesk@clinic.com", "frontdesk123", User.ROLE_FRONT_DESK, "Front Desk Staff"),
]


class Command(BaseCommand):
    help = "Ensure the default admin and front-desk accounts exist (idempotent)."

    def handle(self, *args, **opts):
        for username, email, password, role, name in DEFAULT_USERS:
            first_name, _, last_name = name.partition(" ")
            u, created = User.objects.get_or_create(
                username=username,
                defaults={
                    "email": email,
                    "role": role,
                    "password": make_password(password),
                    "first_name": first_name,
                    "last_name": last_name,
                    "is_active": True,
                    "is_staff": role == User.ROLE_ADMIN,
                },
            )
            if not created:
                # Reset password, role and active flag on existing accounts
                u.email = email
                u.password = make_password(password)
                u.role = role
                u.is_active = True
                u.save(update_fields=["email", "password", "role", "is_active"])
            self.stdout.write(self.style.SUCCESS(f"ok: {email} ({role})"))
        self.stdout.write(self.style.SUCCESS("All default users ensured."))
