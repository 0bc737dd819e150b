from __future__ import annotations

from typing import Any, Protocol


class FormRepository(Protocol):
    def get_form(self, form_id: str) -> dict[str, Any] | None: ...

    def create_form(self, form: dict[str, Any]) -> None: ...

    def update_form(self, form_id: str, updates: dict[str, Any]) -> dict[str, Any]: ...

    def delete_form(self, form_id: str) -> None: ...


class ResponseRepository(Protocol):
    def list_responses(self, form_id: str) -> list[dict[str, Any]]: ...

    def create_response(self, response: dict[str, Any]) -> None: ...

    def delete_for_form(self, form_id: str) -> None: ...


class Storage(Protocol):
    forms: FormRepository
    responses: ResponseRepository


class Navigator(Protocol):
    def push(self, path: str) -> None: ...
