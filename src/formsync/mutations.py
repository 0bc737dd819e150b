from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable

from formsync.auth import Identity, workspace_for
from formsync.cache import ReadCache
from formsync.client import FormsClient, form_key, responses_key
from formsync.document import (
    ANONYMOUS_OPTIONS,
    AUTHORABLE_FIELDS,
    Draft,
    Form,
    validate_payload,
)
from formsync.errors import FormsyncError, MutationFailed, ValidationFailed
from formsync.notify import (
    CREATE_MESSAGES,
    DELETE_MESSAGES,
    UPDATE_MESSAGES,
    Messages,
    Notifier,
)
from formsync.protocols import Navigator

logger = logging.getLogger(__name__)

Validator = Callable[[dict[str, Any]], list[str]]

CREATE_PATH = "/create"


def edit_path(form_id: str) -> str:
    return f"/{form_id}/edit"


class Status(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class MutationOutcome:
    status: Status
    value: Any = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.status is Status.SUCCEEDED


def merge_update(form: Form, changes: dict[str, Any]) -> dict[str, Any]:
    """Apply ``changes`` onto the authorable fields of ``form``.

    ``id`` and ``workspace`` are never taken from ``changes``; ``options`` is
    merged key by key so unrelated flags survive.
    """
    merged = form.authorable()
    for name in AUTHORABLE_FIELDS:
        if name not in changes:
            continue
        if name == "options":
            merged["options"] = {**merged["options"], **(changes["options"] or {})}
        else:
            merged[name] = copy.deepcopy(changes[name])
    return merged


class MutationOrchestrator:
    def __init__(
        self,
        client: FormsClient,
        cache: ReadCache,
        notifier: Notifier,
        navigator: Navigator,
        validators: Iterable[Validator] | None = None,
    ) -> None:
        self.client = client
        self.cache = cache
        self.notifier = notifier
        self.navigator = navigator
        self.validators = list(validators) if validators is not None else [validate_payload]
        self._in_flight: set[str] = set()

    def is_pending(self, action: str) -> bool:
        return action in self._in_flight

    async def run(
        self,
        action: str,
        write: Callable[[], Awaitable[Any]],
        messages: Messages,
        invalidate: Iterable[str] = (),
    ) -> MutationOutcome:
        if action in self._in_flight:
            logger.info("Ignoring %s: a previous attempt is still pending", action)
            return MutationOutcome(Status.SKIPPED)

        self._in_flight.add(action)
        toast_id = self.notifier.pending(messages.pending)
        try:
            value = await write()
        except FormsyncError as exc:
            self.notifier.fail(toast_id, messages.failure)
            return MutationOutcome(Status.FAILED, error=exc)
        except Exception as exc:
            logger.exception("Mutation %s failed", action)
            self.notifier.fail(toast_id, messages.failure)
            return MutationOutcome(Status.FAILED, error=MutationFailed(str(exc)))
        finally:
            self._in_flight.discard(action)

        for key in invalidate:
            self.cache.invalidate(key)
        self.notifier.succeed(toast_id, messages.success)
        logger.info("Mutation %s succeeded", action)
        return MutationOutcome(Status.SUCCEEDED, value=value)

    def validate(self, payload: dict[str, Any]) -> None:
        messages: list[str] = []
        for validator in self.validators:
            messages.extend(validator(payload))
        if messages:
            raise ValidationFailed(messages)

    async def create(self, draft: Draft, identity: Identity | None) -> MutationOutcome:
        fields = draft.to_dict()
        payload = {
            "title": fields["title"],
            "workspace": workspace_for(identity),
            "style": fields["style"],
            "header": fields["header"],
            "options": fields["options"] if identity else dict(ANONYMOUS_OPTIONS),
            "blocks": fields["blocks"],
        }

        async def write() -> str:
            self.validate(payload)
            return await self.client.create_form(payload)

        outcome = await self.run("create", write, CREATE_MESSAGES)
        if outcome.ok:
            self.navigator.push(edit_path(outcome.value))
        return outcome

    async def update(self, form: Form, changes: dict[str, Any]) -> MutationOutcome:
        payload = merge_update(form, changes)

        async def write() -> Form:
            self.validate(payload)
            await self.client.update_form(form.id, payload)
            return Form(id=form.id, workspace=form.workspace, **payload)

        return await self.run(
            f"update:{form.id}",
            write,
            UPDATE_MESSAGES,
            invalidate=[form_key(form.id)],
        )

    async def set_option(self, form: Form, name: str, value: Any) -> MutationOutcome:
        return await self.update(form, {"options": {name: value}})

    async def delete(self, form_id: str, workspace: str) -> MutationOutcome:
        async def write() -> None:
            await self.client.delete_form(form_id, workspace)

        outcome = await self.run(f"delete:{form_id}", write, DELETE_MESSAGES)
        if outcome.ok:
            self.cache.evict(form_key(form_id))
            self.cache.evict(responses_key(form_id))
            self.navigator.push(CREATE_PATH)
        return outcome
