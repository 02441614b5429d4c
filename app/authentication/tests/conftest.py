"""
Test configuration and fixtures for authentication tests.
"""

import pytest

from authentication.tests.factories import AdminUserFactory, UserFactory


@pytest.fixture
def user(db):
    """Create a verified customer."""
    return UserFactory()


@pytest.fixture
def admin_user(db):
    """Create an account with the admin role."""
    return AdminUserFactory()
