"""Required-field resolution for edited customers.

The shop configures, per customer type, which fields must be filled.  An
edit is checked against *effective* values: what the command sets where it
set something, the stored value everywhere else.  ``MergedState`` is that
snapshot, built explicitly and handed to the resolver by value.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional

import structlog

from modules.customers.constants import CUSTOMER_FIELD_MAP
from modules.customers.exceptions import MissingRequiredField

if TYPE_CHECKING:
    from modules.customers.commands import EditCustomerCommand
    from modules.customers.models import Customer
    from modules.customers.repositories.interfaces import IRequiredFieldRepository

logger = structlog.get_logger(__name__)


def is_empty(value: Any) -> bool:
    """``None``, ``""``, ``False`` and empty collections count as missing."""
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (set, frozenset, list, tuple, dict)):
        return len(value) == 0
    return False


@dataclass(frozen=True)
class MergedState:
    """Effective values of the requested fields for one customer."""

    customer_type: str
    values: Mapping[str, Any]

    @classmethod
    def build(
        cls,
        customer: Customer,
        command: EditCustomerCommand,
        field_names: Iterable[str],
    ) -> MergedState:
        values = {}
        for name in field_names:
            if command.is_set(name):
                values[name] = getattr(command, name)
            else:
                values[name] = getattr(customer, CUSTOMER_FIELD_MAP.get(name, name), None)
        return cls(customer_type=customer.customer_type, values=MappingProxyType(values))

    def first_missing(self) -> Optional[str]:
        for name in sorted(self.values):
            if is_empty(self.values[name]):
                return name
        return None


class RequiredFieldResolver:
    """Checks a merged customer against the configured required fields."""

    def __init__(self, repository: IRequiredFieldRepository) -> None:
        self._repo = repository

    def required_fields_for(self, customer_type: str) -> frozenset[str]:
        return frozenset(self._repo.get_required_fields(customer_type))

    def merged_state(
        self, customer: Customer, command: EditCustomerCommand
    ) -> MergedState:
        names = self.required_fields_for(customer.customer_type)
        return MergedState.build(customer, command, names)

    def assert_present(self, state: MergedState) -> None:
        """Raises:
        MissingRequiredField: naming the first empty required field.
        """
        missing = state.first_missing()
        if missing is not None:
            logger.warning(
                "customer.required_field_missing",
                customer_type=state.customer_type,
                field_name=missing,
            )
            raise MissingRequiredField(missing)
