from django.apps import AppConfig


class CustomersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.customers"
    label = "customers"

    def ready(self) -> None:
        from django.conf import settings
        from django.db.models.signals import post_delete, post_save

        from modules.core.crypto import PasswordHashing
        from modules.customers.commands import EditCustomerCommand
        from modules.customers.handlers import EditCustomerHandler
        from modules.customers.models import RequiredField
        from modules.customers.repositories.django_repository import (
            CustomerDjangoRepository,
            RequiredFieldDjangoRepository,
        )
        from modules.customers.required_fields import RequiredFieldResolver
        from modules.customers.signals import invalidate_required_fields
        from shared.infrastructure.bus import command_bus

        command_bus.register(
            EditCustomerCommand,
            EditCustomerHandler(
                customer_repository=CustomerDjangoRepository(),
                required_fields=RequiredFieldResolver(RequiredFieldDjangoRepository()),
                hashing=PasswordHashing(),
                legacy_cookie_key=settings.LEGACY_COOKIE_KEY,
            ),
        )

        post_save.connect(
            invalidate_required_fields,
            sender=RequiredField,
            dispatch_uid="customers.required_fields.saved",
        )
        post_delete.connect(
            invalidate_required_fields,
            sender=RequiredField,
            dispatch_uid="customers.required_fields.deleted",
        )
