"""Customer commands.

``EditCustomerCommand`` is a sparse update: apart from ``customer_id``
every field may be left out, and leaving it out is different from sending
an empty value.  Presence is read from pydantic's ``model_fields_set``
(see ``Command.is_set``), so:

- field absent            -> leave the customer's value unchanged
- field present, ``""``   -> set to empty (may then fail required-field checks)
- field present, ``None`` -> clear; only allowed for nullable attributes

Value-level validation happens here, at construction time.  Rules that
need the stored customer (uniqueness, group consistency, required fields)
belong to the handler.
"""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal
from typing import Self
from uuid import UUID

from pydantic import EmailStr, Field, SecretStr, field_validator, model_validator

from modules.customers.constants import (
    APE_CODE_PATTERN,
    EMAIL_MAX_LENGTH,
    NAME_FORBIDDEN_PATTERN,
    NAME_MAX_LENGTH,
    PASSWORD_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
    Gender,
    RiskLevel,
)
from shared.domain.commands import Command

NULLABLE_FIELDS = frozenset({"gender", "birthday", "risk"})


class EditCustomerCommand(Command):
    """Edit an existing customer with the supplied fields only."""

    customer_id: UUID

    gender: Gender | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: EmailStr | None = None
    password: SecretStr | None = None
    birthday: date | None = None
    is_enabled: bool | None = None
    partner_offers: bool | None = None
    newsletter: bool | None = None
    group_ids: frozenset[int] | None = None
    default_group_id: int | None = Field(default=None, gt=0)

    # B2B block
    company: str | None = Field(default=None, max_length=255)
    tax_id: str | None = Field(default=None, max_length=32)
    ape_code: str | None = None
    website: str | None = Field(default=None, max_length=255)
    allowed_outstanding_amount: Decimal | None = Field(default=None, ge=0)
    max_payment_days: int | None = Field(default=None, ge=0)
    risk: RiskLevel | None = None

    # ------------------------------------------------------------------
    # Field validators
    # ------------------------------------------------------------------

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if len(v) > NAME_MAX_LENGTH:
            raise ValueError(f"Name cannot exceed {NAME_MAX_LENGTH} characters.")
        if re.search(NAME_FORBIDDEN_PATTERN, v):
            raise ValueError("Name contains invalid characters.")
        return v

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, v: str | None) -> str | None:
        if v is not None and len(v) > EMAIL_MAX_LENGTH:
            raise ValueError(f"Email cannot exceed {EMAIL_MAX_LENGTH} characters.")
        return v

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: SecretStr | None) -> SecretStr | None:
        if v is None:
            return v
        length = len(v.get_secret_value())
        if not PASSWORD_MIN_LENGTH <= length <= PASSWORD_MAX_LENGTH:
            raise ValueError(
                f"Password must have between {PASSWORD_MIN_LENGTH} and "
                f"{PASSWORD_MAX_LENGTH} characters."
            )
        return v

    @field_validator("birthday")
    @classmethod
    def birthday_not_in_future(cls, v: date | None) -> date | None:
        if v is not None and v > date.today():
            raise ValueError("Birthday cannot be in the future.")
        return v

    @field_validator("ape_code")
    @classmethod
    def validate_ape_code(cls, v: str | None) -> str | None:
        if v and not re.match(APE_CODE_PATTERN, v):
            raise ValueError("Invalid activity code.")
        return v

    @field_validator("group_ids")
    @classmethod
    def group_ids_must_be_positive(cls, v: frozenset[int] | None) -> frozenset[int] | None:
        if v is not None and any(group_id < 1 for group_id in v):
            raise ValueError("Group ids must be positive.")
        return v

    @field_validator("tax_id", mode="before")
    @classmethod
    def sanitize_tax_id(cls, v: str | None) -> str | None:
        """Strip non-digit characters (accept formatted or raw CNPJ)."""
        if not isinstance(v, str):
            return v
        return re.sub(r"\D", "", v)

    @field_validator("company", "website")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v

    @model_validator(mode="after")
    def reject_null_for_required_attributes(self) -> Self:
        """``None`` may only clear nullable attributes."""
        for name in self.model_fields_set - NULLABLE_FIELDS:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null.")
        return self

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def plain_password(self) -> str | None:
        """The supplied plain-text password, for hashing only."""
        return self.password.get_secret_value() if self.password else None
