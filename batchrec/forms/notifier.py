from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


@dataclass
class Notification:
    level: str  # success|error
    message: str


@dataclass
class LogNotifier:
    """Collects user-facing messages and mirrors them to the log."""

    messages: list[Notification] = field(default_factory=list)

    def success(self, message: str) -> None:
        logger.info(message)
        self.messages.append(Notification("success", message))

    def error(self, message: str) -> None:
        logger.warning(message)
        self.messages.append(Notification("error", message))

    @property
    def errors(self) -> list[str]:
        return [m.message for m in self.messages if m.level == "error"]
