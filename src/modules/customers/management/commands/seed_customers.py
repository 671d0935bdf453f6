from __future__ import annotations

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from modules.core.crypto import PasswordHashing
from modules.customers.constants import (
    CustomerType,
    DefaultGroup,
    Gender,
    RequiredFieldName,
)
from modules.customers.models import Customer, CustomerGroup, RequiredField


class Command(BaseCommand):
    help = "Seed database with default groups, sample customers and required fields."

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding customer data...")

        users_created = self._seed_users()
        groups = self._seed_groups()
        customers_created = self._seed_customers(groups)
        required_created = self._seed_required_fields()

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"groups={len(groups)}, "
                f"customers={customers_created}, "
                f"required_fields={required_created}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        if User.objects.filter(username="admin").exists():
            return 0
        User.objects.create_superuser("admin", password="admin123")
        return 1

    def _seed_groups(self) -> dict[int, CustomerGroup]:
        self.stdout.write("Creating default groups...")
        groups = {}
        for group in DefaultGroup:
            groups[group.value], _ = CustomerGroup.objects.get_or_create(
                id=group.value, defaults={"name": group.label}
            )
        return groups

    def _seed_customers(self, groups: dict[int, CustomerGroup]) -> int:
        self.stdout.write("Creating customers...")
        hashing = PasswordHashing()
        seed_customers = [
            ("Ana", "Souza", "ana@example.com", Gender.MRS, False),
            ("Bruno", "Lima", "bruno@example.com", Gender.MR, False),
            ("Carla", "Mendes", "carla@example.com", Gender.MRS, False),
            ("Diego", "Alves", "diego@example.com", Gender.MR, True),
            ("Eva", "Rocha", "ana@example.com", Gender.MRS, True),
        ]
        created = 0
        for first_name, last_name, email, gender, is_guest in seed_customers:
            exists = Customer.objects.filter(
                email=email, is_guest=is_guest, last_name=last_name
            ).exists()
            if exists:
                continue
            default_group = groups[
                DefaultGroup.GUEST if is_guest else DefaultGroup.CUSTOMER
            ]
            customer = Customer.objects.create(
                first_name=first_name,
                last_name=last_name,
                email=email,
                gender=gender,
                is_guest=is_guest,
                password="" if is_guest else hashing.hash("cliente123"),
                default_group=default_group,
            )
            customer.groups.set([default_group.id])
            created += 1
        return created

    def _seed_required_fields(self) -> int:
        created = 0
        for customer_type in (CustomerType.REGISTERED, CustomerType.GUEST):
            _, was_created = RequiredField.objects.get_or_create(
                customer_type=customer_type,
                field_name=RequiredFieldName.LAST_NAME,
            )
            created += int(was_created)
        return created
