from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from jsonschema import Draft7Validator

from formsync.utils import new_ulid

AUTHORABLE_FIELDS = ("title", "header", "style", "options", "blocks")

UNTITLED = "Untitled form"
DEFAULT_ICON = "/img/defaultIcon.svg"

ANONYMOUS_OPTIONS = {"publicResponses": True, "lockedResponses": False}

FORM_PAYLOAD_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "workspace": {"type": ["string", "null"]},
        "header": {
            "type": "object",
            "properties": {"icon": {"type": ["string", "null"]}},
        },
        "style": {"type": "object"},
        "options": {
            "type": "object",
            "properties": {
                "publicResponses": {"type": "boolean"},
                "lockedResponses": {"type": "boolean"},
            },
        },
        "blocks": {"type": "array", "items": {"type": "object"}},
    },
}

_payload_validator = Draft7Validator(FORM_PAYLOAD_SCHEMA)


def default_header() -> dict[str, Any]:
    return {"icon": None, "cover": None}


def default_style() -> dict[str, Any]:
    return {"font": "sans", "fullWidth": False, "smallText": False}


def default_options() -> dict[str, Any]:
    return {"publicResponses": False, "lockedResponses": False}


def ensure_block_id(block: dict[str, Any]) -> dict[str, Any]:
    if block.get("id"):
        return block
    return {**block, "id": new_ulid()}


@dataclass
class Form:
    id: str
    workspace: str
    title: str = ""
    header: dict[str, Any] = field(default_factory=default_header)
    style: dict[str, Any] = field(default_factory=default_style)
    options: dict[str, Any] = field(default_factory=default_options)
    blocks: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Form:
        return cls(
            id=str(data["id"]),
            workspace=data.get("workspace"),
            title=data.get("title") or "",
            header=data.get("header", default_header()),
            style=data.get("style", default_style()),
            options={**default_options(), **(data.get("options") or {})},
            blocks=list(data.get("blocks") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "workspace": self.workspace,
            "title": self.title,
            "header": self.header,
            "style": self.style,
            "options": self.options,
            "blocks": self.blocks,
        }

    def authorable(self) -> dict[str, Any]:
        return {name: copy.deepcopy(getattr(self, name)) for name in AUTHORABLE_FIELDS}


@dataclass(frozen=True)
class Response:
    id: str
    form_id: str
    created_time: int
    data: dict[str, Any]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Response:
        return cls(
            id=str(data["id"]),
            form_id=str(data.get("formId", "")),
            created_time=int(data.get("__createdtime__") or 0),
            data=dict(data.get("data") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "formId": self.form_id,
            "__createdtime__": self.created_time,
            "data": self.data,
        }


@dataclass
class Draft:
    """The five authorable fields of a form being edited."""

    title: str = ""
    header: dict[str, Any] = field(default_factory=default_header)
    style: dict[str, Any] = field(default_factory=default_style)
    options: dict[str, Any] = field(default_factory=default_options)
    blocks: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def defaults(cls) -> Draft:
        return cls()

    @classmethod
    def from_form(cls, form: Form) -> Draft:
        return cls(**form.authorable())

    def to_dict(self) -> dict[str, Any]:
        return {name: copy.deepcopy(getattr(self, name)) for name in AUTHORABLE_FIELDS}


def validate_payload(payload: dict[str, Any]) -> list[str]:
    errors = sorted(_payload_validator.iter_errors(payload), key=lambda err: list(err.path))
    messages = []
    for err in errors:
        location = ".".join(str(part) for part in err.path) or "payload"
        messages.append(f"{location}: {err.message}")
    return messages


def display_title(title: str | None) -> str:
    return title if title else UNTITLED


def display_icon(header: dict[str, Any] | None) -> str:
    icon = (header or {}).get("icon")
    return icon if icon else DEFAULT_ICON


def share_link(host: str, form_id: str) -> str:
    return f"https://{host}/{form_id}/viewform"
