"""Customer repository interfaces.

``ICustomerRepository`` extends ``IRepository[Customer]`` with the email
look-up the uniqueness rule needs.  ``IRequiredFieldRepository`` is the
configuration source for mandatory customer fields.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.customers.models import Customer


class ICustomerRepository(IRepository["Customer"]):
    """Repository contract for the Customer aggregate."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Customer]:
        """List customers with optional filters."""

    @abstractmethod
    def get_registered_by_email(
        self, email: str, exclude_id: Optional[Any] = None
    ) -> Optional[Customer]:
        """Retrieve a registered (non-guest) customer by email.

        Guests never match.  ``exclude_id`` leaves one customer out of the
        search, typically the one being edited.
        """


class IRequiredFieldRepository(ABC):
    """Configuration source for required customer fields."""

    @abstractmethod
    def get_required_fields(self, customer_type: str) -> FrozenSet[str]:
        """Field names that must be non-empty for ``customer_type``."""
