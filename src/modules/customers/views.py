"""Customer API views.

Reads go through ``CustomerDjangoRepository``; edits are turned into an
``EditCustomerCommand`` and dispatched on the command bus.  Each domain
error kind is translated into its own HTTP status here and nowhere else;
the view never swallows generic exceptions.
"""

from __future__ import annotations

from typing import Any, Dict

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.parsers import JSONParser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.customers.commands import EditCustomerCommand
from modules.customers.exceptions import (
    CustomerEditError,
    CustomerNotFound,
    DefaultGroupNotInGroups,
    DuplicateCustomerEmail,
    InvalidCustomer,
    MissingRequiredField,
    PersistenceFailure,
)
from modules.customers.filters import CustomerFilter
from modules.customers.models import Customer
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.customers.serializers import CustomerSerializer
from shared.infrastructure.bus import command_bus

ERROR_STATUS: Dict[type, int] = {
    CustomerNotFound: status.HTTP_404_NOT_FOUND,
    DuplicateCustomerEmail: status.HTTP_409_CONFLICT,
    DefaultGroupNotInGroups: status.HTTP_422_UNPROCESSABLE_ENTITY,
    MissingRequiredField: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidCustomer: status.HTTP_422_UNPROCESSABLE_ENTITY,
    PersistenceFailure: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _error_response(exc: CustomerEditError) -> Response:
    body: Dict[str, Any] = {"detail": str(exc), "code": exc.code}
    if isinstance(exc, MissingRequiredField):
        body["field"] = exc.field_name
    if isinstance(exc, InvalidCustomer):
        body["errors"] = exc.errors
    return Response(
        body,
        status=ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST),
    )


class CustomerViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for listing, retrieving and editing customers.

    Does **not** extend ``ModelViewSet``: there is no create or destroy,
    and edits bypass the serializer entirely.  Edit bodies are JSON only,
    so list fields such as ``group_ids`` keep every value.
    """

    filterset_class = CustomerFilter
    search_fields = ["first_name", "last_name", "email", "company"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    queryset = Customer.objects.all()
    serializer_class = CustomerSerializer
    parser_classes = [JSONParser]
    throttle_scope = "customer_edit"
    ordering_fields = ["created_at", "id", "last_name", "email"]
    ordering = ["-created_at", "-id"]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._repo = CustomerDjangoRepository()

    def get_queryset(self):
        return Customer.objects.select_related("default_group").prefetch_related(
            "groups"
        )

    def get_throttles(self):
        # Only edits are scoped; reads use the default user/anon rates.
        if self.action not in ("update", "partial_update"):
            self.throttle_scope = None
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Retrieve
    # ------------------------------------------------------------------

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/customers/{pk}/"""
        customer = self._repo.get_by_id(pk) if pk else None
        if customer is None:
            return Response(
                {"detail": "Customer not found.", "code": CustomerNotFound.code},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(CustomerSerializer(customer).data)

    # ------------------------------------------------------------------
    # Edit
    # ------------------------------------------------------------------

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/customers/{pk}/

        Only the keys present in the body are changed.
        """
        if not isinstance(request.data, dict):
            return Response(
                {"detail": "Edit body must be a JSON object."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        data = dict(request.data)
        data["customer_id"] = pk

        try:
            command = EditCustomerCommand.model_validate(data)
        except PydanticValidationError as exc:
            return Response(
                {
                    "detail": "Invalid edit request.",
                    "errors": exc.errors(
                        include_url=False, include_context=False, include_input=False
                    ),
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            customer = command_bus.dispatch(command)
        except CustomerEditError as exc:
            return _error_response(exc)

        return Response(CustomerSerializer(customer).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/customers/{pk}/"""
        return self.update(request, pk)
