"""Customer domain exceptions.

Raised by the edit handler when an invariant or the persistence gate
rejects a command.  Every kind carries a stable ``code`` so the API layer
(Views) can map it to a response without string matching.  None of them
is retryable: the same command would fail the same way.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class CustomerEditError(Exception):
    """Base class for every rejection of an edit-customer command."""

    code = "CUSTOMER_EDIT_FAILED"
    default_message = "Customer could not be edited."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)


class CustomerNotFound(CustomerEditError):
    """The identifier does not resolve to a customer."""

    code = "CUSTOMER_NOT_FOUND"
    default_message = "Customer not found."

    def __init__(self, customer_id: Any) -> None:
        self.customer_id = customer_id
        super().__init__(f"Customer {customer_id} not found.")


class DuplicateCustomerEmail(CustomerEditError):
    """Another registered customer already uses the requested email."""

    code = "DUPLICATE_EMAIL"

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f'Customer with email "{email}" already exists.')


class DefaultGroupNotInGroups(CustomerEditError):
    """The effective default group is not one of the effective groups."""

    code = "DEFAULT_GROUP_NOT_IN_GROUPS"

    def __init__(self, default_group_id: Any) -> None:
        self.default_group_id = default_group_id
        super().__init__(
            f'Customer default group with id "{default_group_id}" '
            "must be in access groups."
        )


class MissingRequiredField(CustomerEditError):
    """A configured required field is empty after the merge."""

    code = "MISSING_REQUIRED_FIELD"

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f'Required field "{field_name}" is missing.')


class InvalidCustomer(CustomerEditError):
    """Record-level validation rejected the merged customer."""

    code = "INVALID_CUSTOMER"
    default_message = "Customer contains invalid field values."

    def __init__(self, errors: Optional[Dict[str, Any]] = None) -> None:
        self.errors = errors or {}
        super().__init__()


class PersistenceFailure(CustomerEditError):
    """Storage rejected the write."""

    code = "PERSISTENCE_FAILURE"
    default_message = "Failed to update customer."
