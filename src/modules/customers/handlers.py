"""Command handlers for the Customer aggregate.

``EditCustomerHandler`` applies a sparse ``EditCustomerCommand`` in four
stages that always run in this order:

1. load      -- resolve the customer (``CustomerNotFound``)
2. check     -- email uniqueness among registered customers
               (``DuplicateCustomerEmail``) and default-group membership
               (``DefaultGroupNotInGroups``)
3. merge     -- copy every supplied field onto the in-memory customer,
               hashing the password and staging the group set
4. persist   -- required fields (``MissingRequiredField``), record
               validation (``InvalidCustomer``), single write
               (``PersistenceFailure``)

Any rejection aborts the pipeline before the write, and the whole
operation runs inside one transaction, so a partial edit is never stored.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from modules.customers.commands import EditCustomerCommand
from modules.customers.constants import B2B_FIELD_MAP, PROFILE_FIELD_MAP
from modules.customers.exceptions import (
    CustomerEditError,
    CustomerNotFound,
    DefaultGroupNotInGroups,
    DuplicateCustomerEmail,
    InvalidCustomer,
    PersistenceFailure,
)
from shared.domain.bus import ICommandHandler

if TYPE_CHECKING:
    from modules.core.crypto import PasswordHashing
    from modules.customers.models import Customer
    from modules.customers.repositories.interfaces import ICustomerRepository
    from modules.customers.required_fields import RequiredFieldResolver

logger = structlog.get_logger(__name__)


class EditCustomerHandler(ICommandHandler[EditCustomerCommand]):
    """Edits an existing customer with the data supplied in the command.

    Receives its collaborators via constructor injection (DIP).
    ``legacy_cookie_key`` is the secondary key passed to the hashing
    service with every new password.
    """

    def __init__(
        self,
        customer_repository: ICustomerRepository,
        required_fields: RequiredFieldResolver,
        hashing: PasswordHashing,
        legacy_cookie_key: str,
    ) -> None:
        self._repo = customer_repository
        self._required_fields = required_fields
        self._hashing = hashing
        self._legacy_cookie_key = legacy_cookie_key

    @transaction.atomic
    def handle(self, command: EditCustomerCommand) -> Customer:
        """Apply ``command`` and return the saved customer.

        Raises:
            CustomerNotFound, DuplicateCustomerEmail, DefaultGroupNotInGroups,
            MissingRequiredField, InvalidCustomer, PersistenceFailure
        """
        log = logger.bind(
            customer_id=str(command.customer_id),
            fields=sorted(set(command.changes()) - {"customer_id"}),
        )

        try:
            customer = self._load(command)
            log.debug("customer.edit.loaded", is_guest=customer.is_guest)

            # Two guests may share an email, two registered customers may not.
            if not customer.is_guest:
                self._assert_email_is_not_taken(customer, command)
            self._assert_default_group_is_in_groups(customer, command)
            log.debug("customer.edit.checked")

            self._merge(customer, command)
            log.debug("customer.edit.merged")

            self._validate(customer, command)
            log.debug("customer.edit.validated")

            self._persist(customer)
        except CustomerEditError as exc:
            log.warning("customer.edit.rejected", error_code=exc.code)
            raise

        log.info("customer.edit.committed")
        return customer

    # ------------------------------------------------------------------
    # 1. Load
    # ------------------------------------------------------------------

    def _load(self, command: EditCustomerCommand) -> Customer:
        customer = self._repo.get_by_id(str(command.customer_id))
        if customer is None:
            raise CustomerNotFound(command.customer_id)
        return customer

    # ------------------------------------------------------------------
    # 2. Invariant checks
    # ------------------------------------------------------------------

    def _assert_email_is_not_taken(
        self, customer: Customer, command: EditCustomerCommand
    ) -> None:
        if not command.is_set("email"):
            return

        if command.email == customer.email:
            return

        # Guests are ignored: only registered accounts collide.
        if self._repo.get_registered_by_email(command.email, exclude_id=customer.id):
            raise DuplicateCustomerEmail(command.email)

    def _assert_default_group_is_in_groups(
        self, customer: Customer, command: EditCustomerCommand
    ) -> None:
        if not (command.is_set("group_ids") or command.is_set("default_group_id")):
            return

        group_ids = (
            command.group_ids if command.is_set("group_ids") else customer.group_ids
        )
        default_group_id = (
            command.default_group_id
            if command.is_set("default_group_id")
            else customer.default_group_id
        )

        if default_group_id not in group_ids:
            raise DefaultGroupNotInGroups(default_group_id)

    # ------------------------------------------------------------------
    # 3. Merge
    # ------------------------------------------------------------------

    def _merge(self, customer: Customer, command: EditCustomerCommand) -> None:
        for field, attribute in PROFILE_FIELD_MAP.items():
            if command.is_set(field):
                setattr(customer, attribute, getattr(command, field))

        if command.is_set("password"):
            customer.password = self._hashing.hash(
                command.plain_password(), self._legacy_cookie_key
            )

        if command.is_set("group_ids"):
            customer.assign_groups(command.group_ids)

        self._merge_b2b(customer, command)

    @staticmethod
    def _merge_b2b(customer: Customer, command: EditCustomerCommand) -> None:
        for field, attribute in B2B_FIELD_MAP.items():
            if command.is_set(field):
                setattr(customer, attribute, getattr(command, field))

    # ------------------------------------------------------------------
    # 4. Validate & persist
    # ------------------------------------------------------------------

    def _validate(self, customer: Customer, command: EditCustomerCommand) -> None:
        state = self._required_fields.merged_state(customer, command)
        self._required_fields.assert_present(state)

        # Uniqueness is left to the database constraint at write time.
        try:
            customer.full_clean(validate_unique=False, validate_constraints=False)
        except ValidationError as exc:
            raise InvalidCustomer(exc.message_dict) from exc

    def _persist(self, customer: Customer) -> None:
        try:
            self._repo.save(customer)
        except DatabaseError as exc:
            logger.error(
                "customer.edit.write_failed",
                customer_id=str(customer.id),
                error=str(exc),
            )
            raise PersistenceFailure() from exc
