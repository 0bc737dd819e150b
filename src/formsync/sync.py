from __future__ import annotations

import logging

from formsync.cache import FetchState
from formsync.client import form_key
from formsync.document import Draft
from formsync.store import DraftStore

logger = logging.getLogger(__name__)


class SyncController:
    """Seeds a DraftStore from the fetched form of the edit flow.

    Seeding happens once per fetch resolution. A later resolution for the same
    key (after invalidation) seeds again and replaces unsaved local edits.
    Callers check the authorization gate before observing a state.
    """

    def __init__(self, store: DraftStore) -> None:
        self.store = store
        self.form_id: str | None = None
        self._seeded: tuple[str, int] | None = None

    @property
    def key(self) -> str | None:
        return form_key(self.form_id) if self.form_id else None

    def bind(self, form_id: str) -> None:
        if form_id == self.form_id:
            return
        self.form_id = form_id
        self._seeded = None

    def observe(self, state: FetchState) -> bool:
        if state.data is None or state.key != self.key:
            return False
        marker = (state.key, state.generation)
        if marker == self._seeded:
            return False
        self.store.seed(Draft.from_form(state.data))
        self._seeded = marker
        logger.debug("Draft seeded from %s (generation %s)", state.key, state.generation)
        return True

