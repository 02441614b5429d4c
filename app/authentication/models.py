"""
Authentication models.

This module defines the account model used across the checkout backend:
- User: Custom user model with email-based authentication and a role

Related files:
    - managers.py: Custom user manager for email-based creation
    - management/commands/: Admin bootstrap commands

Security:
    - User passwords hashed with Django's PBKDF2
    - Admin role grants unrestricted access to every order
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager


class UserRole(models.TextChoices):
    """Account roles understood by the order access rules."""

    CUSTOMER = "customer", "Customer"
    ADMIN = "admin", "Admin"


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the primary identifier.

    Fields:
        email: Primary identifier, unique, used for login and receipts
        email_verified: Whether the user's email has been verified
        role: Account role (customer or admin)
        is_active: Whether the user account is active
        is_staff: Whether the user can access Django admin
        date_joined: When the user account was created
        updated_at: When the user record was last modified

    Usage:
        # Create a customer
        user = User.objects.create_user(
            email='user@example.com',
            password='securepassword'
        )

        # Create an admin (role=admin, staff, verified)
        admin = User.objects.create_superuser(
            email='admin@example.com',
            password='adminpassword'
        )
    """

    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="User's email address (primary identifier)",
    )

    email_verified = models.BooleanField(
        default=False,
        help_text="Whether the user's email has been verified",
    )

    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.CUSTOMER,
        db_index=True,
        help_text="Account role; admins may read and modify every order",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.email

    def get_full_name(self):
        return self.email

    def get_short_name(self):
        return self.email.split("@")[0]

    @property
    def is_admin(self):
        """Whether this account carries the admin role."""
        return self.role == UserRole.ADMIN

    def promote_to_admin(self):
        """Grant the admin role and the flags an admin account needs."""
        self.role = UserRole.ADMIN
        self.is_staff = True
        self.email_verified = True
        self.save(update_fields=["role", "is_staff", "email_verified", "updated_at"])
