from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from formsync.config import ANONYMOUS_WORKSPACE
from formsync.errors import NotAuthenticated

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    subject_id: str


class IdentityProvider(Protocol):
    async def get_current_identity(self) -> Identity | None: ...


class StaticIdentityProvider:
    def __init__(self, subject_id: str | None = None) -> None:
        self._identity = Identity(subject_id) if subject_id else None

    async def get_current_identity(self) -> Identity | None:
        return self._identity


@dataclass(frozen=True)
class IdentityState:
    identity: Identity | None = None
    error: Exception | None = None
    is_loading: bool = True


class AuthSession:
    """Resolves the identity provider once and keeps the result."""

    def __init__(self, provider: IdentityProvider) -> None:
        self._provider = provider
        self._state = IdentityState()

    @property
    def state(self) -> IdentityState:
        return self._state

    async def resolve(self) -> IdentityState:
        if not self._state.is_loading:
            return self._state
        try:
            identity = await self._provider.get_current_identity()
        except Exception as exc:
            logger.warning("Identity resolution failed: %s", exc)
            error = NotAuthenticated(str(exc) or "identity resolution failed")
            self._state = IdentityState(error=error, is_loading=False)
        else:
            self._state = IdentityState(identity=identity, is_loading=False)
        return self._state


def workspace_for(identity: Identity | None) -> str:
    return identity.subject_id if identity else ANONYMOUS_WORKSPACE
