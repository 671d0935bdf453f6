from uuid import uuid4

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.customers.constants import DefaultGroup
from modules.customers.models import Customer, CustomerGroup


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    """The cache outlives the per-test transaction; reset it around each test."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def auth_client():
    """APIClient with a force-authenticated Django user."""
    client = APIClient()
    user = get_user_model().objects.create_user(
        username="backoffice", password="testpass123"
    )
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def groups():
    """The three default groups, with their well-known ids (1, 2, 3)."""
    return {
        group.value: CustomerGroup.objects.create(id=group.value, name=group.label)
        for group in DefaultGroup
    }


@pytest.fixture()
def make_customer(groups):
    """Factory for customers belonging to the ``customer`` group by default."""

    def _make(save: bool = True, group_ids=(DefaultGroup.CUSTOMER,), **overrides):
        defaults = {
            "first_name": "Maria",
            "last_name": "Silva",
            "email": f"{uuid4().hex[:8]}@example.com",
            "default_group": groups[DefaultGroup.CUSTOMER],
        }
        defaults.update(overrides)
        customer = Customer(**defaults)
        if save:
            customer.save()
            customer.groups.set(group_ids)
        return customer

    return _make
