from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import tzinfo
from typing import Callable, Iterable

from formsync.auth import AuthSession
from formsync.cache import FetchState, ReadCache
from formsync.client import FormsClient, form_key, responses_key
from formsync.document import Draft, Form, display_icon, display_title, share_link
from formsync.errors import NotFound
from formsync.gate import Decision, GateResult, evaluate
from formsync.mutations import MutationOrchestrator, MutationOutcome, Status, Validator
from formsync.notify import Notifier
from formsync.protocols import Navigator
from formsync.responses import ResponseTable, build_response_table
from formsync.store import DraftStore, SidebarPreference
from formsync.sync import SyncController

logger = logging.getLogger(__name__)

DELETE_PROMPT = "Are you sure you want to delete this form?"
LINK_COPIED = "Link copied to clipboard"


class Router:
    def __init__(self, path: str = "/create") -> None:
        self.current = path
        self.history = [path]

    def push(self, path: str) -> None:
        logger.debug("Navigating %s -> %s", self.current, path)
        self.current = path
        self.history.append(path)


@dataclass(frozen=True)
class EditorView:
    gate: GateResult
    draft: Draft | None
    title: str
    icon: str
    show_sidebar: bool


@dataclass(frozen=True)
class DashboardView:
    gate: GateResult
    form: Form | None
    table: ResponseTable | None
    share_link: str
    show_sidebar: bool


class AuthoringSession:
    """Everything one authoring session shares between its screens."""

    def __init__(
        self,
        client: FormsClient,
        cache: ReadCache,
        auth: AuthSession,
        notifier: Notifier,
        navigator: Navigator,
        sidebar: SidebarPreference,
        public_host: str = "localhost:8000",
        store: DraftStore | None = None,
        validators: Iterable[Validator] | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        self.client = client
        self.cache = cache
        self.auth = auth
        self.notifier = notifier
        self.navigator = navigator
        self.sidebar = sidebar
        self.public_host = public_host
        self.store = store or DraftStore()
        self.tz = tz
        self.mutations = MutationOrchestrator(
            client, cache, notifier, navigator, validators=validators
        )

    async def read_form(self, form_id: str) -> FetchState:
        return await self.cache.read(form_key(form_id), lambda: self.client.fetch_form(form_id))

    async def read_responses(self, form_id: str) -> FetchState:
        return await self.cache.read(
            responses_key(form_id), lambda: self.client.fetch_responses(form_id)
        )

    def toggle_sidebar(self) -> bool:
        return self.sidebar.toggle()


class CreateScreen:
    def __init__(self, session: AuthoringSession, resume: bool = False) -> None:
        self.session = session
        self.resume = resume

    def enter(self) -> None:
        if not self.resume:
            self.session.store.reset()

    def view(self) -> EditorView:
        draft = self.session.store.snapshot()
        return EditorView(
            gate=GateResult(Decision.AUTHORIZED),
            draft=draft,
            title=display_title(draft.title),
            icon=display_icon(draft.header),
            show_sidebar=self.session.sidebar.get(),
        )

    async def render(self) -> EditorView:
        await self.session.auth.resolve()
        return self.view()

    async def publish(self) -> MutationOutcome:
        identity = (await self.session.auth.resolve()).identity
        return await self.session.mutations.create(self.session.store.snapshot(), identity)

    def toggle_sidebar(self) -> bool:
        return self.session.toggle_sidebar()


class EditScreen:
    def __init__(self, session: AuthoringSession, form_id: str) -> None:
        self.session = session
        self.form_id = form_id
        self.sync = SyncController(session.store)
        self.sync.bind(form_id)

    def switch(self, form_id: str) -> None:
        self.form_id = form_id
        self.sync.bind(form_id)

    def gate(self) -> GateResult:
        return evaluate(self.session.cache.state(form_key(self.form_id)), self.session.auth.state)

    def view(self) -> EditorView:
        gate = self.gate()
        if gate.allowed:
            self.sync.observe(self.session.cache.state(form_key(self.form_id)))
        draft = self.session.store.snapshot() if gate.allowed else None
        return EditorView(
            gate=gate,
            draft=draft,
            title=display_title(draft.title if draft else None),
            icon=display_icon(draft.header if draft else None),
            show_sidebar=self.session.sidebar.get(),
        )

    async def render(self) -> EditorView:
        await self.session.auth.resolve()
        await self.session.read_form(self.form_id)
        return self.view()

    async def save(self) -> MutationOutcome:
        gate = self.gate()
        gate.raise_for_decision()
        form = self.session.cache.state(form_key(self.form_id)).data
        return await self.session.mutations.update(form, self.session.store.snapshot().to_dict())

    def toggle_sidebar(self) -> bool:
        return self.session.toggle_sidebar()


class DashboardScreen:
    def __init__(self, session: AuthoringSession, form_id: str) -> None:
        self.session = session
        self.form_id = form_id
        self.closed = False

    @property
    def link(self) -> str:
        return share_link(self.session.public_host, self.form_id)

    def gate(self) -> GateResult:
        if self.closed:
            return GateResult(Decision.ERROR, NotFound(self.form_id))
        cache = self.session.cache
        return evaluate(
            cache.state(form_key(self.form_id)),
            self.session.auth.state,
            cache.state(responses_key(self.form_id)),
        )

    def view(self) -> DashboardView:
        gate = self.gate()
        form = None
        table = None
        if gate.allowed:
            cache = self.session.cache
            form = cache.state(form_key(self.form_id)).data
            responses = cache.state(responses_key(self.form_id))
            table = build_response_table(responses.data, responses.is_loading, self.session.tz)
        return DashboardView(
            gate=gate,
            form=form,
            table=table,
            share_link=self.link if gate.allowed else "",
            show_sidebar=self.session.sidebar.get(),
        )

    async def render(self) -> DashboardView:
        if not self.closed:
            await self.session.auth.resolve()
            await asyncio.gather(
                self.session.read_form(self.form_id),
                self.session.read_responses(self.form_id),
            )
        return self.view()

    def copy_share_link(self) -> str:
        self.session.notifier.info(LINK_COPIED)
        return self.link

    async def toggle_locked(self, value: bool) -> MutationOutcome:
        return await self.session.mutations.set_option(self._form(), "lockedResponses", value)

    async def delete(self, confirm: Callable[[str], bool] | None = None) -> MutationOutcome:
        form = self._form()
        if confirm is not None and not confirm(DELETE_PROMPT):
            return MutationOutcome(Status.SKIPPED)
        outcome = await self.session.mutations.delete(form.id, form.workspace)
        if outcome.ok:
            self.closed = True
        return outcome

    def toggle_sidebar(self) -> bool:
        return self.session.toggle_sidebar()

    def _form(self) -> Form:
        gate = self.gate()
        gate.raise_for_decision()
        return self.session.cache.state(form_key(self.form_id)).data
