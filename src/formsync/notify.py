from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)

PENDING = "pending"
SUCCESS = "success"
FAILURE = "failure"
INFO = "info"


@dataclass(frozen=True)
class Messages:
    pending: str
    success: str
    failure: str


CREATE_MESSAGES = Messages(
    pending="Wait, we're publishing your form",
    success="Redirecting to form view",
    failure="Error creating form",
)
UPDATE_MESSAGES = Messages(
    pending="Updating form",
    success="Form has been updated",
    failure="Error while updating form",
)
DELETE_MESSAGES = Messages(
    pending="Deleting form",
    success="Form has been deleted",
    failure="Error while deleting form",
)


@dataclass(frozen=True)
class Toast:
    id: int
    phase: str
    message: str


class Notifier(Protocol):
    def pending(self, message: str) -> int: ...

    def succeed(self, toast_id: int, message: str) -> None: ...

    def fail(self, toast_id: int, message: str) -> None: ...

    def info(self, message: str) -> None: ...


class ToastNotifier:
    """Keeps every toast transition in order and logs it."""

    def __init__(self) -> None:
        self.toasts: list[Toast] = []
        self._ids = itertools.count(1)

    def pending(self, message: str) -> int:
        toast_id = next(self._ids)
        self._push(Toast(toast_id, PENDING, message))
        return toast_id

    def succeed(self, toast_id: int, message: str) -> None:
        self._push(Toast(toast_id, SUCCESS, message))

    def fail(self, toast_id: int, message: str) -> None:
        self._push(Toast(toast_id, FAILURE, message))

    def info(self, message: str) -> None:
        self._push(Toast(next(self._ids), INFO, message))

    def phases(self) -> list[str]:
        return [toast.phase for toast in self.toasts]

    def last(self) -> Toast | None:
        return self.toasts[-1] if self.toasts else None

    def _push(self, toast: Toast) -> None:
        self.toasts.append(toast)
        if toast.phase == FAILURE:
            logger.warning("[toast %s] %s", toast.id, toast.message)
        else:
            logger.info("[toast %s] %s", toast.id, toast.message)
