"""Customer DRF serializers for API output.

Edits never go through a serializer: the view builds an
``EditCustomerCommand`` and dispatches it, so every write passes the
handler's invariants.  The serializer only renders customers.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.customers.models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    """Read-only serializer for the Customer resource.

    ``password`` is never exposed; ``tax_id`` is masked to its last four
    digits.
    """

    groups = serializers.PrimaryKeyRelatedField(many=True, read_only=True)
    tax_id = serializers.SerializerMethodField()

    class Meta:
        model = Customer
        fields = [
            "id",
            "is_guest",
            "email",
            "gender",
            "first_name",
            "last_name",
            "birthday",
            "is_active",
            "newsletter",
            "partner_offers",
            "groups",
            "default_group",
            "company",
            "tax_id",
            "ape_code",
            "website",
            "allowed_outstanding_amount",
            "max_payment_days",
            "risk",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_tax_id(self, obj: Customer) -> str:
        if not obj.tax_id:
            return ""
        return f"***{obj.tax_id[-4:]}"
