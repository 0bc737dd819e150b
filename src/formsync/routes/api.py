from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from formsync.config import ANONYMOUS_WORKSPACE
from formsync.document import (
    AUTHORABLE_FIELDS,
    default_header,
    default_options,
    default_style,
    validate_payload,
)
from formsync.utils import new_ulid, now_utc, to_epoch_ms

logger = logging.getLogger(__name__)

router = APIRouter()


def form_output(form: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": form["id"],
        "workspace": form.get("workspace"),
        "title": form.get("title", ""),
        "header": form.get("header", {}),
        "style": form.get("style", {}),
        "options": form.get("options", {}),
        "blocks": form.get("blocks", []),
    }


def response_output(response: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": response["id"],
        "formId": response["form_id"],
        "__createdtime__": to_epoch_ms(response["created_at"]),
        "data": response.get("data", {}),
    }


async def read_payload(request: Request) -> dict[str, Any]:
    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="body must be JSON")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="body must be a JSON object")
    return payload


def require_form(request: Request, form_id: str) -> dict[str, Any]:
    form = request.app.state.storage.forms.get_form(form_id)
    if not form:
        raise HTTPException(status_code=404, detail="form not found")
    return form


@router.get("/api/forms/{form_id}", tags=["api/forms"])
async def api_get_form(request: Request, form_id: str) -> JSONResponse:
    form = require_form(request, form_id)
    return JSONResponse(form_output(form))


@router.post("/api/forms", tags=["api/forms"])
async def api_create_form(request: Request) -> JSONResponse:
    storage = request.app.state.storage
    payload = await read_payload(request)
    errors = validate_payload(payload)
    if errors:
        raise HTTPException(status_code=400, detail=errors)

    form_id = new_ulid()
    now = now_utc()
    storage.forms.create_form(
        {
            "id": form_id,
            "workspace": payload.get("workspace") or ANONYMOUS_WORKSPACE,
            "title": payload.get("title") or "",
            "header": payload.get("header", default_header()),
            "style": payload.get("style", default_style()),
            "options": {**default_options(), **(payload.get("options") or {})},
            "blocks": payload.get("blocks") or [],
            "created_at": now,
            "updated_at": now,
        }
    )
    logger.info("Form created: %s", form_id)
    return JSONResponse({"id": form_id})


@router.patch("/api/forms/{form_id}", tags=["api/forms"])
async def api_update_form(request: Request, form_id: str) -> JSONResponse:
    storage = request.app.state.storage
    require_form(request, form_id)
    payload = await read_payload(request)
    errors = validate_payload(payload)
    if errors:
        raise HTTPException(status_code=400, detail=errors)
    # id and workspace are fixed at creation
    updates: dict[str, Any] = {
        key: payload[key] for key in AUTHORABLE_FIELDS if key in payload
    }
    updates["updated_at"] = now_utc()
    storage.forms.update_form(form_id, updates)
    logger.info("Form updated: %s (%s)", form_id, ", ".join(sorted(updates)))
    return JSONResponse({"ok": True})


@router.delete("/api/forms/{form_id}/delete", tags=["api/forms"])
async def api_delete_form(request: Request, form_id: str) -> JSONResponse:
    storage = request.app.state.storage
    form = require_form(request, form_id)
    payload = await read_payload(request)
    if payload.get("workspace") != form.get("workspace"):
        raise HTTPException(status_code=403, detail="workspace does not own this form")
    storage.responses.delete_for_form(form_id)
    storage.forms.delete_form(form_id)
    logger.info("Form deleted: %s", form_id)
    return JSONResponse({"ok": True})


@router.get("/api/forms/{form_id}/responses", tags=["api/responses"])
async def api_list_responses(request: Request, form_id: str) -> JSONResponse:
    storage = request.app.state.storage
    require_form(request, form_id)
    responses = storage.responses.list_responses(form_id)
    return JSONResponse([response_output(item) for item in responses])


@router.post("/api/forms/{form_id}/responses", tags=["api/responses"])
async def api_submit_response(request: Request, form_id: str) -> JSONResponse:
    storage = request.app.state.storage
    form = require_form(request, form_id)
    if (form.get("options") or {}).get("lockedResponses"):
        raise HTTPException(status_code=409, detail="form is not accepting responses")
    payload = await read_payload(request)
    data = payload.get("data", payload)
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="data must be an object")

    response = {
        "id": new_ulid(),
        "form_id": form_id,
        "data": data,
        "created_at": now_utc(),
    }
    storage.responses.create_response(response)
    return JSONResponse(response_output(response))
