"""End-to-end edit flow through the command bus against the real database.

Covers:
- successful edit persisted with groups and hashed password.
- rejected edits leave the stored customer untouched.
- a concurrent registration of the same email surfaces as a write failure.
"""

from unittest.mock import patch

import pytest
from django.conf import settings
from django.db import IntegrityError

from modules.core.crypto import PasswordHashing
from modules.customers.commands import EditCustomerCommand
from modules.customers.exceptions import (
    DefaultGroupNotInGroups,
    DuplicateCustomerEmail,
    InvalidCustomer,
    MissingRequiredField,
    PersistenceFailure,
)
from modules.customers.handlers import EditCustomerHandler
from modules.customers.models import Customer, RequiredField
from modules.customers.repositories.django_repository import (
    CustomerDjangoRepository,
    RequiredFieldDjangoRepository,
)
from modules.customers.required_fields import RequiredFieldResolver
from shared.infrastructure.bus import command_bus

pytestmark = pytest.mark.integration


def _snapshot(customer_id):
    stored = Customer.objects.get(id=customer_id)
    return {
        "email": stored.email,
        "first_name": stored.first_name,
        "last_name": stored.last_name,
        "password": stored.password,
        "default_group_id": stored.default_group_id,
        "groups": stored.group_ids,
    }


class TestSuccessfulEdit:
    def test_changes_are_persisted(self, make_customer):
        customer = make_customer(email="ana@example.com")

        command_bus.dispatch(
            EditCustomerCommand(
                customer_id=customer.id,
                first_name="Ana Clara",
                email="ana.clara@example.com",
                group_ids=[1, 3],
                default_group_id=1,
                newsletter=True,
            )
        )

        stored = Customer.objects.get(id=customer.id)
        assert stored.first_name == "Ana Clara"
        assert stored.email == "ana.clara@example.com"
        assert stored.default_group_id == 1
        assert stored.group_ids == {1, 3}
        assert stored.newsletter is True

    def test_password_is_stored_hashed(self, make_customer):
        customer = make_customer()

        command_bus.dispatch(
            EditCustomerCommand(customer_id=customer.id, password="n3w-secret")
        )

        stored = Customer.objects.get(id=customer.id)
        assert stored.password != "n3w-secret"
        assert PasswordHashing().check_hash(
            "n3w-secret", stored.password, settings.LEGACY_COOKIE_KEY
        )

    def test_guest_may_take_registered_email(self, make_customer):
        make_customer(email="ana@example.com")
        guest = make_customer(email="eva@example.com", is_guest=True)

        command_bus.dispatch(
            EditCustomerCommand(customer_id=guest.id, email="ana@example.com")
        )

        assert Customer.objects.get(id=guest.id).email == "ana@example.com"

    def test_formatted_tax_id_is_stored_as_digits(self, make_customer):
        customer = make_customer()

        command_bus.dispatch(
            EditCustomerCommand(customer_id=customer.id, tax_id="11.222.333/0001-81")
        )

        assert Customer.objects.get(id=customer.id).tax_id == "11222333000181"

    def test_changing_email_case_of_self(self, make_customer):
        customer = make_customer(email="ana@example.com")

        command_bus.dispatch(
            EditCustomerCommand(customer_id=customer.id, email="Ana@example.com")
        )

        assert Customer.objects.get(id=customer.id).email == "Ana@example.com"


class TestRejectedEditLeavesStoreUnchanged:
    def test_duplicate_email(self, make_customer):
        make_customer(email="b@x.com")
        customer = make_customer(email="a@x.com")
        before = _snapshot(customer.id)

        with pytest.raises(DuplicateCustomerEmail):
            command_bus.dispatch(
                EditCustomerCommand(
                    customer_id=customer.id, email="B@X.com", first_name="Joana"
                )
            )

        assert _snapshot(customer.id) == before

    def test_default_group_outside_groups(self, make_customer):
        customer = make_customer()
        before = _snapshot(customer.id)

        with pytest.raises(DefaultGroupNotInGroups):
            command_bus.dispatch(
                EditCustomerCommand(
                    customer_id=customer.id,
                    group_ids=[1, 2],
                    default_group_id=3,
                    password="n3w-secret",
                )
            )

        assert _snapshot(customer.id) == before

    def test_missing_required_field(self, make_customer):
        RequiredField.objects.create(customer_type="registered", field_name="last_name")
        customer = make_customer()
        before = _snapshot(customer.id)

        with pytest.raises(MissingRequiredField):
            command_bus.dispatch(
                EditCustomerCommand(customer_id=customer.id, last_name="", first_name="Jo")
            )

        assert _snapshot(customer.id) == before

    def test_guest_configuration_does_not_apply_to_registered(self, make_customer):
        RequiredField.objects.create(customer_type="guest", field_name="company")
        customer = make_customer(company="")

        command_bus.dispatch(EditCustomerCommand(customer_id=customer.id, first_name="Jo"))

        assert Customer.objects.get(id=customer.id).first_name == "Jo"

    def test_unknown_group(self, make_customer):
        customer = make_customer()
        before = _snapshot(customer.id)

        with pytest.raises(InvalidCustomer):
            command_bus.dispatch(
                EditCustomerCommand(customer_id=customer.id, group_ids=[3, 99])
            )

        assert _snapshot(customer.id) == before


class TestConcurrentEmailRace:
    def test_storage_constraint_rejects_second_writer(self, make_customer):
        """Another writer takes the email between the check and the write."""
        customer = make_customer(email="a@x.com")
        rival = make_customer(email="rival@x.com")
        handler = EditCustomerHandler(
            customer_repository=CustomerDjangoRepository(),
            required_fields=RequiredFieldResolver(RequiredFieldDjangoRepository()),
            hashing=PasswordHashing(),
            legacy_cookie_key=settings.LEGACY_COOKIE_KEY,
        )

        def lose_race(*args, **kwargs):
            Customer.objects.filter(id=rival.id).update(email="b@x.com")
            return None

        with patch.object(
            CustomerDjangoRepository, "get_registered_by_email", side_effect=lose_race
        ):
            with pytest.raises(PersistenceFailure) as exc_info:
                handler.handle(
                    EditCustomerCommand(customer_id=customer.id, email="b@x.com")
                )

        assert isinstance(exc_info.value.__cause__, IntegrityError)
        assert Customer.objects.get(id=customer.id).email == "a@x.com"
