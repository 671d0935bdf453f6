"""Customer aggregate, customer groups and required-field configuration.

Business rules implemented at the storage level:
- Registered (non-guest) customers have a unique email, compared
  case-insensitively.  Guests may share an email with anyone.  This
  constraint is the final arbiter for concurrent edits racing past the
  handler's own uniqueness check.
- ``default_group`` must be one of the customer's ``groups`` (enforced by
  the edit handler, which sees the effective post-edit values).
- Record-level validation (``clean``) covers CNPJ, activity code,
  birthday and group existence.
"""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

import structlog
from validate_docbr import CNPJ

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models.functions import Lower

from modules.core.models import BaseModel
from modules.customers.constants import (
    APE_CODE_PATTERN,
    EMAIL_MAX_LENGTH,
    NAME_MAX_LENGTH,
    CustomerType,
    Gender,
    RequiredFieldName,
    RiskLevel,
)

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------


class CustomerGroup(models.Model):
    """Customer group (price/visibility classification)."""

    name = models.CharField(max_length=64, unique=True)

    class Meta:
        db_table = "customer_groups"
        ordering = ["id"]

    def __str__(self) -> str:
        return self.name


# ---------------------------------------------------------------------------
# Customer
# ---------------------------------------------------------------------------


class CustomerQuerySet(models.QuerySet):
    def registered(self) -> CustomerQuerySet:
        return self.filter(is_guest=False)

    def guests(self) -> CustomerQuerySet:
        return self.filter(is_guest=True)


class CustomerManager(models.Manager):
    def get_queryset(self) -> CustomerQuerySet:
        return CustomerQuerySet(self.model, using=self._db)

    def registered(self) -> CustomerQuerySet:
        return self.get_queryset().registered()

    def guests(self) -> CustomerQuerySet:
        return self.get_queryset().guests()


class Customer(BaseModel):
    """Customer aggregate root.

    ``password`` only ever holds a hash produced by the hashing service.
    Group membership can be *staged* in memory with ``assign_groups``;
    the repository writes it together with the row.
    """

    is_guest = models.BooleanField(default=False)
    email = models.EmailField(max_length=EMAIL_MAX_LENGTH)
    password = models.CharField(max_length=255, blank=True, default="")

    gender = models.PositiveSmallIntegerField(
        choices=Gender.choices, null=True, blank=True
    )
    first_name = models.CharField(max_length=NAME_MAX_LENGTH)
    last_name = models.CharField(max_length=NAME_MAX_LENGTH)
    birthday = models.DateField(null=True, blank=True)

    is_active = models.BooleanField(default=True)
    newsletter = models.BooleanField(default=False)
    partner_offers = models.BooleanField(default=False)

    groups = models.ManyToManyField(
        CustomerGroup, related_name="customers", blank=True
    )
    default_group = models.ForeignKey(
        CustomerGroup,
        on_delete=models.PROTECT,
        related_name="default_for",
    )

    # B2B block
    company = models.CharField(max_length=255, blank=True, default="")
    tax_id = models.CharField(max_length=14, blank=True, default="")
    ape_code = models.CharField(max_length=5, blank=True, default="")
    website = models.URLField(max_length=255, blank=True, default="")
    allowed_outstanding_amount = models.DecimalField(
        max_digits=20,
        decimal_places=6,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    max_payment_days = models.PositiveIntegerField(default=0)
    risk = models.PositiveSmallIntegerField(
        choices=RiskLevel.choices, null=True, blank=True
    )

    objects = CustomerManager()

    class Meta:
        db_table = "customers"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                Lower("email"),
                condition=models.Q(is_guest=False),
                name="customers_registered_email_uniq",
            ),
        ]
        indexes = [
            models.Index(fields=["email"], name="customers_email_idx"),
            models.Index(fields=["is_active"], name="customers_active_idx"),
        ]

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    @property
    def customer_type(self) -> str:
        return CustomerType.GUEST if self.is_guest else CustomerType.REGISTERED

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    @property
    def group_ids(self) -> set[int]:
        """Staged group ids if any, otherwise the persisted membership."""
        pending = getattr(self, "_pending_group_ids", None)
        if pending is not None:
            return set(pending)
        if self._state.adding:
            return set()
        return set(self.groups.values_list("id", flat=True))

    def assign_groups(self, group_ids: Iterable[int]) -> None:
        """Stage a new group set; nothing is written until the repository saves."""
        self._pending_group_ids = set(group_ids)

    def pop_pending_groups(self) -> Optional[set[int]]:
        pending = getattr(self, "_pending_group_ids", None)
        if hasattr(self, "_pending_group_ids"):
            delattr(self, "_pending_group_ids")
        return pending

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _sanitize_tax_id(value: str) -> str:
        return re.sub(r"\D", "", value)

    def clean(self) -> None:
        super().clean()
        errors: dict[str, str] = {}

        if self.tax_id:
            self.tax_id = self._sanitize_tax_id(self.tax_id)
            if not CNPJ().validate(self.tax_id):
                logger.warning(
                    "customer.invalid_tax_id",
                    customer_id=str(self.id),
                    tax_id_suffix=self.tax_id[-4:],
                )
                errors["tax_id"] = "Invalid CNPJ number."

        if self.ape_code and not re.match(APE_CODE_PATTERN, self.ape_code):
            errors["ape_code"] = "Invalid activity code."

        if self.birthday and self.birthday > date.today():
            errors["birthday"] = "Birthday cannot be in the future."

        pending = getattr(self, "_pending_group_ids", None)
        if pending:
            known = set(
                CustomerGroup.objects.filter(id__in=pending).values_list(
                    "id", flat=True
                )
            )
            unknown = sorted(pending - known)
            if unknown:
                errors["groups"] = f"Unknown customer groups: {unknown}."

        if errors:
            raise ValidationError(errors)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        kind = "guest" if self.is_guest else "registered"
        return f"{self.first_name} {self.last_name} ({kind})"


# ---------------------------------------------------------------------------
# Required-field configuration
# ---------------------------------------------------------------------------


class RequiredField(models.Model):
    """A customer field the shop requires to be filled, per customer type."""

    customer_type = models.CharField(max_length=16, choices=CustomerType.choices)
    field_name = models.CharField(max_length=32, choices=RequiredFieldName.choices)

    class Meta:
        db_table = "customer_required_fields"
        ordering = ["customer_type", "field_name"]
        constraints = [
            models.UniqueConstraint(
                fields=["customer_type", "field_name"],
                name="customer_required_field_uniq",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.customer_type}:{self.field_name}"
