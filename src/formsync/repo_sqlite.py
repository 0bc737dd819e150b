from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from formsync.models import Base, FormModel, ResponseModel
from formsync.utils import dumps_json, loads_json, now_utc

_JSON_COLUMNS = {
    "header": "header_json",
    "style": "style_json",
    "options": "options_json",
    "blocks": "blocks_json",
}


class SQLiteFormRepo:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._Session = session_factory

    def get_form(self, form_id: str) -> dict[str, Any] | None:
        with self._Session() as session:
            row = session.get(FormModel, form_id)
            return self._to_dict(row) if row else None

    def create_form(self, form: dict[str, Any]) -> None:
        with self._Session() as session:
            row = FormModel(
                id=form["id"],
                workspace=form["workspace"],
                title=form["title"],
                header_json=dumps_json(form["header"]),
                style_json=dumps_json(form["style"]),
                options_json=dumps_json(form["options"]),
                blocks_json=dumps_json(form["blocks"]),
                created_at=form["created_at"],
                updated_at=form["updated_at"],
            )
            session.add(row)
            session.commit()

    def update_form(self, form_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        with self._Session() as session:
            row = session.get(FormModel, form_id)
            if not row:
                raise KeyError(form_id)
            for key, value in updates.items():
                if key in _JSON_COLUMNS:
                    setattr(row, _JSON_COLUMNS[key], dumps_json(value))
                elif key in {"id", "workspace", "created_at"}:
                    continue
                else:
                    setattr(row, key, value)
            session.commit()
            session.refresh(row)
            return self._to_dict(row)

    def delete_form(self, form_id: str) -> None:
        with self._Session() as session:
            row = session.get(FormModel, form_id)
            if row:
                session.delete(row)
                session.commit()

    @staticmethod
    def _to_dict(row: FormModel) -> dict[str, Any]:
        return {
            "id": row.id,
            "workspace": row.workspace,
            "title": row.title or "",
            "header": loads_json(row.header_json) or {},
            "style": loads_json(row.style_json) or {},
            "options": loads_json(row.options_json) or {},
            "blocks": loads_json(row.blocks_json) or [],
            "created_at": row.created_at,
            "updated_at": row.updated_at,
        }


class SQLiteResponseRepo:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._Session = session_factory

    def list_responses(self, form_id: str) -> list[dict[str, Any]]:
        with self._Session() as session:
            rows = (
                session.query(ResponseModel)
                .filter(ResponseModel.form_id == form_id)
                .order_by(ResponseModel.created_at.asc())
                .all()
            )
            return [self._to_dict(row) for row in rows]

    def create_response(self, response: dict[str, Any]) -> None:
        with self._Session() as session:
            row = ResponseModel(
                id=response["id"],
                form_id=response["form_id"],
                data_json=dumps_json(response["data"]),
                created_at=response.get("created_at") or now_utc(),
            )
            session.add(row)
            session.commit()

    def delete_for_form(self, form_id: str) -> None:
        with self._Session() as session:
            session.query(ResponseModel).filter(ResponseModel.form_id == form_id).delete()
            session.commit()

    @staticmethod
    def _to_dict(row: ResponseModel) -> dict[str, Any]:
        return {
            "id": row.id,
            "form_id": row.form_id,
            "data": loads_json(row.data_json) or {},
            "created_at": row.created_at,
        }


class SQLiteStorage:
    def __init__(self, db_path: Path) -> None:
        self._engine = create_engine(f"sqlite:///{db_path}", future=True)
        self._Session = sessionmaker(self._engine, expire_on_commit=False)
        Base.metadata.create_all(self._engine)
        self.forms = SQLiteFormRepo(self._Session)
        self.responses = SQLiteResponseRepo(self._Session)
