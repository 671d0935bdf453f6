"""Domain bus interfaces for in-process command handling."""

from __future__ import annotations

from typing import Any, Generic, Protocol, Type, TypeVar

from shared.domain.commands import Command

C = TypeVar("C", bound=Command, contravariant=True)


class CommandHandlerNotFound(LookupError):
    """No handler is registered for the dispatched command class."""


class ICommandHandler(Protocol, Generic[C]):
    """Handler interface for commands."""

    def handle(self, command: C) -> Any: ...


class ICommandBus(Protocol):
    """Command bus interface."""

    def dispatch(self, command: Command) -> Any: ...

    def register(self, command_class: Type[C], handler: ICommandHandler[C]) -> None: ...
