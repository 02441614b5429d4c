"""
Promote an existing account to the admin role.

Usage:
    python manage.py promote_admin user@example.com
"""

import logging

from django.core.management.base import BaseCommand, CommandError

from authentication.models import User

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Grant the admin role to an existing user."

    def add_arguments(self, parser):
        parser.add_argument("email", help="Email of the account to promote")

    def handle(self, *args, **options):
        email = options["email"]

        try:
            user = User.objects.get(email__iexact=email)
        except User.DoesNotExist:
            raise CommandError(f"No user with email {email} exists.")

        user.promote_to_admin()
        logger.info("Promoted user to admin", extra={"user_id": user.pk})

        self.stdout.write(self.style.SUCCESS(f"{user.email} is now an admin."))
