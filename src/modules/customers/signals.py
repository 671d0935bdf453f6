"""Signal receivers keeping the required-field cache consistent."""

from __future__ import annotations

import structlog

from modules.customers.models import RequiredField
from modules.customers.repositories.django_repository import (
    RequiredFieldDjangoRepository,
)

logger = structlog.get_logger(__name__)


def invalidate_required_fields(sender, instance: RequiredField, **kwargs) -> None:
    RequiredFieldDjangoRepository.invalidate(instance.customer_type)
    logger.info(
        "customer.required_fields_invalidated",
        customer_type=instance.customer_type,
    )
