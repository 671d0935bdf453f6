"""Django ORM implementations of the customer repositories.

Error handling follows the Null Object pattern for reads: methods return
``None`` instead of raising, and the handler decides what a missing
customer means.  Writes let ``DatabaseError`` propagate so the caller can
tell a rejected write apart from a successful one.
"""

from __future__ import annotations

from typing import Any, Dict, FrozenSet, List, Optional

import structlog
from django.conf import settings
from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.customers.models import Customer, RequiredField
from modules.customers.repositories.interfaces import (
    ICustomerRepository,
    IRequiredFieldRepository,
)

logger = structlog.get_logger(__name__)

REQUIRED_FIELDS_CACHE_KEY = "customers:required_fields:{customer_type}"


class CustomerDjangoRepository(ICustomerRepository):
    """Concrete Customer repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Customer]:
        """Retrieve a customer by primary key.

        Returns ``None`` for non-existent or invalid IDs (e.g. malformed UUID).
        """
        try:
            return (
                Customer.objects.select_related("default_group").filter(id=id).first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Customer]:
        """List customers with optional Django ORM look-ups.

        Examples of valid filters::

            {"is_guest": False}
            {"last_name__icontains": "silva", "is_active": True}
        """
        queryset = Customer.objects.select_related("default_group").prefetch_related(
            "groups"
        )
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Customer) -> Customer:
        """Persist the customer row and any staged group membership together."""
        entity.save()
        pending = entity.pop_pending_groups()
        if pending is not None:
            entity.groups.set(pending)
        logger.info(
            "customer.saved",
            customer_id=str(entity.id),
            groups_updated=pending is not None,
        )
        return entity

    def get_registered_by_email(
        self, email: str, exclude_id: Optional[Any] = None
    ) -> Optional[Customer]:
        queryset = Customer.objects.registered().filter(email__iexact=email)
        if exclude_id is not None:
            queryset = queryset.exclude(id=exclude_id)
        return queryset.first()


class RequiredFieldDjangoRepository(IRequiredFieldRepository):
    """Required-field configuration read from ``RequiredField`` rows.

    Results are cached per customer type; ``invalidate`` is wired to the
    model's save/delete signals in ``CustomersConfig.ready``.
    """

    def get_required_fields(self, customer_type: str) -> FrozenSet[str]:
        key = REQUIRED_FIELDS_CACHE_KEY.format(customer_type=customer_type)
        cached = cache.get(key)
        if cached is not None:
            return frozenset(cached)

        names = sorted(
            RequiredField.objects.filter(customer_type=customer_type).values_list(
                "field_name", flat=True
            )
        )
        cache.set(key, names, settings.REQUIRED_FIELDS_CACHE_TIMEOUT)
        return frozenset(names)

    @staticmethod
    def invalidate(customer_type: str) -> None:
        cache.delete(REQUIRED_FIELDS_CACHE_KEY.format(customer_type=customer_type))
