"""
Fixtures for order tests.
"""

import pytest
from rest_framework.test import APIClient

from authentication.tests.factories import AdminUserFactory, UserFactory
from products.tests.factories import ProductFactory


@pytest.fixture
def customer(db):
    return UserFactory()


@pytest.fixture
def other_customer(db):
    return UserFactory()


@pytest.fixture
def admin_user(db):
    return AdminUserFactory()


@pytest.fixture
def products(db):
    return ProductFactory.create_batch(3)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for(api_client):
    """Return an API client authenticated as the given user."""

    def _client_for(user):
        api_client.force_authenticate(user=user)
        return api_client

    return _client_for
