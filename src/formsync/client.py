from __future__ import annotations

import logging
from typing import Any

import httpx

from formsync.document import Form, Response
from formsync.errors import FetchFailed, MutationFailed, NotFound

logger = logging.getLogger(__name__)


def form_key(form_id: str) -> str:
    return f"/api/forms/{form_id}"


def responses_key(form_id: str) -> str:
    return f"/api/forms/{form_id}/responses"


class FormsClient:
    """Async access to the form and response collections, keyed by form id."""

    def __init__(
        self,
        base_url: str,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> FormsClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def fetch_form(self, form_id: str) -> Form:
        data = await self._read(form_key(form_id), form_id)
        return Form.from_dict(data)

    async def fetch_responses(self, form_id: str) -> list[Response]:
        items = await self._read(responses_key(form_id), form_id)
        return [Response.from_dict(item) for item in items]

    async def create_form(self, payload: dict[str, Any]) -> str:
        body = await self._write("POST", "/api/forms", payload)
        return str(body["id"])

    async def update_form(self, form_id: str, payload: dict[str, Any]) -> None:
        await self._write("PATCH", form_key(form_id), payload)

    async def delete_form(self, form_id: str, workspace: str) -> None:
        await self._write("DELETE", f"{form_key(form_id)}/delete", {"workspace": workspace})

    async def submit_response(self, form_id: str, data: dict[str, Any]) -> Response:
        body = await self._write("POST", responses_key(form_id), {"data": data})
        return Response.from_dict(body)

    async def _read(self, path: str, form_id: str) -> Any:
        try:
            response = await self._http.get(path)
        except httpx.HTTPError as exc:
            raise FetchFailed(f"GET {path} failed: {exc}") from exc
        if response.status_code == 404:
            raise NotFound(form_id)
        try:
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPStatusError, ValueError) as exc:
            raise FetchFailed(f"GET {path} failed: {exc}") from exc

    async def _write(self, method: str, path: str, payload: dict[str, Any]) -> Any:
        try:
            response = await self._http.request(method, path, json=payload)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise MutationFailed(f"{method} {path} failed: {exc}") from exc
