from __future__ import annotations

import copy
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable

from filelock import FileLock
from tinydb import Query, TinyDB

from formsync.config import SIDEBAR_KEY
from formsync.document import Draft, ensure_block_id


class DraftStore:
    """Client-held state of the form being authored.

    The store does not know whether the draft came from the create flow or
    from a fetched form; ``seed`` replaces all five fields in one assignment.
    """

    def __init__(self, draft: Draft | None = None) -> None:
        self._draft = draft or Draft.defaults()
        self.revision = 0

    @property
    def title(self) -> str:
        return self._draft.title

    @property
    def header(self) -> dict[str, Any]:
        return self._draft.header

    @property
    def style(self) -> dict[str, Any]:
        return self._draft.style

    @property
    def options(self) -> dict[str, Any]:
        return self._draft.options

    @property
    def blocks(self) -> list[dict[str, Any]]:
        return self._draft.blocks

    def snapshot(self) -> Draft:
        return copy.deepcopy(self._draft)

    def reset(self) -> None:
        self._replace(Draft.defaults())

    def seed(self, draft: Draft) -> None:
        self._replace(copy.deepcopy(draft))

    def set_title(self, title: str) -> None:
        self._draft.title = title
        self.revision += 1

    def set_header(self, header: dict[str, Any]) -> None:
        self._draft.header = dict(header)
        self.revision += 1

    def set_style(self, style: dict[str, Any]) -> None:
        self._draft.style = dict(style)
        self.revision += 1

    def set_options(self, options: dict[str, Any]) -> None:
        self._draft.options = dict(options)
        self.revision += 1

    def set_blocks(self, blocks: list[dict[str, Any]]) -> None:
        self._draft.blocks = [ensure_block_id(block) for block in blocks]
        self.revision += 1

    def add_block(self, block: dict[str, Any], index: int | None = None) -> str:
        block = ensure_block_id(block)
        blocks = list(self._draft.blocks)
        if index is None:
            blocks.append(block)
        else:
            blocks.insert(index, block)
        self._draft.blocks = blocks
        self.revision += 1
        return block["id"]

    def update_block(self, block_id: str, changes: dict[str, Any]) -> None:
        position = self._index_of(block_id)
        blocks = list(self._draft.blocks)
        blocks[position] = {**blocks[position], **changes, "id": block_id}
        self._draft.blocks = blocks
        self.revision += 1

    def move_block(self, block_id: str, index: int) -> None:
        blocks = list(self._draft.blocks)
        block = blocks.pop(self._index_of(block_id))
        blocks.insert(max(0, min(index, len(blocks))), block)
        self._draft.blocks = blocks
        self.revision += 1

    def remove_block(self, block_id: str) -> None:
        blocks = list(self._draft.blocks)
        del blocks[self._index_of(block_id)]
        self._draft.blocks = blocks
        self.revision += 1

    def _index_of(self, block_id: str) -> int:
        for position, block in enumerate(self._draft.blocks):
            if block.get("id") == block_id:
                return position
        raise KeyError(block_id)

    def _replace(self, draft: Draft) -> None:
        self._draft = draft
        self.revision += 1


class SidebarPreference:
    """Durable sidebar visibility flag shared by every authoring screen."""

    def __init__(self, path: Path, default: bool = False) -> None:
        self._path = path
        self._lock = FileLock(f"{path}.lock")
        self._default = default

    @contextmanager
    def _db(self) -> Iterable[TinyDB]:
        with self._lock:
            db = TinyDB(self._path)
            try:
                yield db
            finally:
                db.close()

    def get(self) -> bool:
        with self._db() as db:
            item = db.table("prefs").get(Query().key == SIDEBAR_KEY)
        return bool(item["value"]) if item else self._default

    def set(self, value: bool) -> None:
        with self._db() as db:
            db.table("prefs").upsert(
                {"key": SIDEBAR_KEY, "value": bool(value)}, Query().key == SIDEBAR_KEY
            )

    def toggle(self) -> bool:
        with self._lock:
            value = not self.get()
            self.set(value)
        return value
