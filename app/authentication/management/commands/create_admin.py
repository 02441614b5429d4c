"""
Create the first administrator account.

If an admin already exists nothing is changed and the existing admin
emails are listed, so the command is safe to run on every deploy.

Usage:
    python manage.py create_admin
    python manage.py create_admin --email ops@example.com --password s3cret
"""

import logging
import secrets

from django.core.management.base import BaseCommand, CommandError

from authentication.models import User

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_EMAIL = "admin@example.com"


class Command(BaseCommand):
    help = "Create an administrator account unless one already exists."

    def add_arguments(self, parser):
        parser.add_argument(
            "--email",
            default=DEFAULT_ADMIN_EMAIL,
            help=f"Email of the admin account (default: {DEFAULT_ADMIN_EMAIL})",
        )
        parser.add_argument(
            "--password",
            default=None,
            help="Password for the admin account (generated when omitted)",
        )

    def handle(self, *args, **options):
        admins = User.objects.admins().order_by("email")
        if admins.exists():
            self.stdout.write("Admin accounts already exist:")
            for admin in admins:
                self.stdout.write(f"  - {admin.email}")
            return

        email = options["email"]
        password = options["password"]
        generated = password is None
        if generated:
            password = secrets.token_urlsafe(12)

        if User.objects.filter(email__iexact=email).exists():
            raise CommandError(
                f"A non-admin account with email {email} already exists; "
                f"use promote_admin instead."
            )

        admin = User.objects.create_superuser(email=email, password=password)

        logger.info("Created admin account", extra={"user_id": admin.pk})

        self.stdout.write(self.style.SUCCESS("Admin account created."))
        self.stdout.write(f"Email: {admin.email}")
        if generated:
            self.stdout.write(f"Password: {password}")
