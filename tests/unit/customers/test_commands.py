"""Unit tests for EditCustomerCommand (sparse fields and value validation)."""

from datetime import date, timedelta
from uuid import uuid4

import pytest
from pydantic import ValidationError

from modules.customers.commands import EditCustomerCommand
from modules.customers.constants import Gender, RiskLevel

pytestmark = pytest.mark.unit


def _command(**fields) -> EditCustomerCommand:
    return EditCustomerCommand(customer_id=uuid4(), **fields)


# ===========================================================================
# Sparse fields
# ===========================================================================


class TestSparseFields:
    def test_only_id_is_required(self):
        command = _command()
        assert command.changes() == {"customer_id": command.customer_id}

    def test_missing_id_rejected(self):
        with pytest.raises(ValidationError):
            EditCustomerCommand(first_name="Joana")

    def test_absent_field_is_not_set(self):
        command = _command(first_name="Joana")
        assert command.is_set("first_name")
        assert not command.is_set("last_name")

    def test_empty_string_is_set(self):
        command = _command(last_name="")
        assert command.is_set("last_name")
        assert command.last_name == ""

    def test_false_is_set(self):
        command = _command(newsletter=False)
        assert command.is_set("newsletter")
        assert command.newsletter is False

    @pytest.mark.parametrize("field", ["gender", "birthday", "risk"])
    def test_nullable_fields_accept_none(self, field):
        command = _command(**{field: None})
        assert command.is_set(field)
        assert getattr(command, field) is None

    @pytest.mark.parametrize(
        "field", ["first_name", "email", "is_enabled", "group_ids", "company"]
    )
    def test_other_fields_reject_none(self, field):
        with pytest.raises(ValidationError, match=f"{field} cannot be null"):
            _command(**{field: None})

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            _command(nickname="jo")

    def test_command_is_immutable(self):
        command = _command(first_name="Joana")
        with pytest.raises(ValidationError):
            command.first_name = "Ana"

    def test_command_name(self):
        assert _command().command_name == "EditCustomerCommand"

    def test_parses_request_payload(self):
        command = EditCustomerCommand.model_validate(
            {
                "customer_id": str(uuid4()),
                "gender": 2,
                "birthday": "1990-05-17",
                "group_ids": [1, 3, 3],
                "risk": 2,
            }
        )
        assert command.gender == Gender.MRS
        assert command.birthday == date(1990, 5, 17)
        assert command.group_ids == frozenset({1, 3})
        assert command.risk == RiskLevel.LOW


# ===========================================================================
# Value validation
# ===========================================================================


class TestNames:
    def test_name_is_stripped(self):
        assert _command(first_name="  Joana ").first_name == "Joana"

    @pytest.mark.parametrize("name", ["J0ana", "Jo<b>", "Ana;", "a@b"])
    def test_forbidden_characters(self, name):
        with pytest.raises(ValidationError, match="invalid characters"):
            _command(first_name=name)

    def test_accented_names_allowed(self):
        assert _command(last_name="Conceição-D'Ávila").last_name == "Conceição-D'Ávila"

    def test_name_too_long(self):
        with pytest.raises(ValidationError, match="cannot exceed"):
            _command(last_name="a" * 256)


class TestEmail:
    def test_invalid_email(self):
        with pytest.raises(ValidationError):
            _command(email="not-an-email")

    def test_valid_email(self):
        assert _command(email="joana@example.com").email == "joana@example.com"


class TestPassword:
    def test_password_is_secret(self):
        command = _command(password="n3w-secret")
        assert "n3w-secret" not in repr(command)
        assert command.plain_password() == "n3w-secret"

    def test_plain_password_absent(self):
        assert _command().plain_password() is None

    @pytest.mark.parametrize("password", ["abcd", "x" * 73])
    def test_password_length(self, password):
        with pytest.raises(ValidationError, match="Password must have"):
            _command(password=password)


class TestOtherFields:
    def test_future_birthday(self):
        with pytest.raises(ValidationError, match="future"):
            _command(birthday=date.today() + timedelta(days=1))

    def test_invalid_gender(self):
        with pytest.raises(ValidationError):
            _command(gender=9)

    @pytest.mark.parametrize("code", ["6201Z", "620A"])
    def test_valid_ape_code(self, code):
        assert _command(ape_code=code).ape_code == code

    @pytest.mark.parametrize("code", ["62Z", "62011", "ZZZZZ"])
    def test_invalid_ape_code(self, code):
        with pytest.raises(ValidationError, match="activity code"):
            _command(ape_code=code)

    def test_empty_ape_code_clears(self):
        assert _command(ape_code="").ape_code == ""

    def test_non_positive_group_id(self):
        with pytest.raises(ValidationError, match="positive"):
            _command(group_ids=[0, 3])

    def test_non_positive_default_group(self):
        with pytest.raises(ValidationError):
            _command(default_group_id=0)

    def test_negative_outstanding_amount(self):
        with pytest.raises(ValidationError):
            _command(allowed_outstanding_amount="-1")

    def test_negative_payment_days(self):
        with pytest.raises(ValidationError):
            _command(max_payment_days=-5)

    def test_text_fields_are_stripped(self):
        command = _command(company=" Acme ", tax_id=" 11222333000181 ")
        assert command.company == "Acme"
        assert command.tax_id == "11222333000181"

    def test_formatted_tax_id_is_sanitized(self):
        assert _command(tax_id="11.222.333/0001-81").tax_id == "11222333000181"

    def test_empty_tax_id_clears(self):
        assert _command(tax_id="").tax_id == ""
