from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[Any]]
Listener = Callable[["FetchState"], None]


@dataclass(frozen=True)
class FetchState:
    """Snapshot of one cached read.

    ``generation`` is unique per successful resolution across the cache, so
    two snapshots with the same generation carry the same fetched value.
    """

    key: str
    data: Any = None
    error: Exception | None = None
    generation: int = 0
    stale: bool = False
    validating: bool = False

    @property
    def is_loading(self) -> bool:
        return self.data is None and self.error is None


class ReadCache:
    def __init__(self) -> None:
        self._states: dict[str, FetchState] = {}
        self._inflight: dict[str, asyncio.Future] = {}
        self._listeners: dict[str, list[Listener]] = {}
        self._resolutions = 0

    def state(self, key: str) -> FetchState:
        return self._states.get(key) or FetchState(key=key)

    async def read(self, key: str, fetcher: Fetcher) -> FetchState:
        current = self._states.get(key)
        if current is not None and not current.stale and not current.validating:
            return current
        inflight = self._inflight.get(key)
        if inflight is not None:
            return await asyncio.shield(inflight)

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        self._set(replace(self.state(key), validating=True))
        try:
            data = await fetcher()
        except asyncio.CancelledError:
            self._inflight.pop(key, None)
            future.cancel()
            raise
        except Exception as exc:
            logger.warning("Read %s failed: %s", key, exc)
            # failed reads are retried on the next read
            result = replace(self.state(key), error=exc, stale=True, validating=False)
        else:
            self._resolutions += 1
            result = FetchState(key=key, data=data, generation=self._resolutions)
        self._inflight.pop(key, None)
        self._set(result)
        future.set_result(result)
        return result

    def invalidate(self, key: str) -> None:
        current = self._states.get(key)
        if current is not None:
            self._set(replace(current, stale=True))

    def evict(self, key: str) -> None:
        self._states.pop(key, None)
        self._notify(FetchState(key=key))

    def subscribe(self, key: str, listener: Listener) -> Callable[[], None]:
        self._listeners.setdefault(key, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(key, [])
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def _set(self, state: FetchState) -> None:
        self._states[state.key] = state
        self._notify(state)

    def _notify(self, state: FetchState) -> None:
        for listener in list(self._listeners.get(state.key, [])):
            listener(state)
