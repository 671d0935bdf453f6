"""In-memory command bus implementation."""

from __future__ import annotations

from typing import Any, Dict, Type

import structlog

from shared.domain.bus import CommandHandlerNotFound, ICommandBus, ICommandHandler
from shared.domain.commands import Command

logger = structlog.get_logger(__name__)


class InMemoryCommandBus(ICommandBus):
    """Simple in-process command bus: exactly one handler per command class.

    Handler exceptions propagate to the caller unchanged.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type[Command], ICommandHandler] = {}

    def register(self, command_class: Type[Command], handler: ICommandHandler) -> None:
        self._handlers[command_class] = handler

    def dispatch(self, command: Command) -> Any:
        handler = self._handlers.get(type(command))
        if handler is None:
            raise CommandHandlerNotFound(
                f"No handler registered for {command.command_name}."
            )
        logger.debug("command.dispatched", command=command.command_name)
        return handler.handle(command)


# Global bus instance (singleton)

command_bus = InMemoryCommandBus()
