from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Any, Sequence

import markupsafe

from formsync.document import Response
from formsync.utils import dumps_json, from_epoch_ms

DATE_COLUMN = "Date"
EMPTY_MESSAGE = "There are no responses yet"


@dataclass(frozen=True)
class TableRow:
    response_id: str
    created_time: int
    date: str
    cells: list[Any]


@dataclass(frozen=True)
class ResponseTable:
    columns: list[str] = field(default_factory=list)
    rows: list[TableRow] = field(default_factory=list)
    empty: bool = False

    @property
    def headers(self) -> list[str]:
        return [DATE_COLUMN, *(column_label(column) for column in self.columns)]

    @property
    def empty_message(self) -> str:
        return EMPTY_MESSAGE if self.empty else ""


def column_label(key: str) -> str:
    # field names arrive HTML-escaped from the fill-out page
    return markupsafe.Markup(key).unescape()


def format_timestamp(value: int, tz: tzinfo | None = None) -> str:
    dt = from_epoch_ms(value, tz)
    hour = dt.hour % 12 or 12
    return f"{dt:%B} {dt.day}, {dt.year} at {hour}:{dt:%M:%S} {dt:%p}"


def build_response_table(
    responses: Sequence[Response] | None,
    is_loading: bool,
    tz: tzinfo | None = None,
) -> ResponseTable | None:
    """Project responses into a table.

    Returns ``None`` while loading and an empty table flagged ``empty`` when
    there is nothing to show. Columns come from the key order of the first
    response; every row is laid out by those columns, so extra keys are
    dropped and missing ones become empty cells. Row order is kept as given.
    """
    if is_loading:
        return None
    if not responses:
        return ResponseTable(empty=True)

    columns = list(responses[0].data.keys())
    rows = [
        TableRow(
            response_id=response.id,
            created_time=response.created_time,
            date=format_timestamp(response.created_time, tz),
            cells=[response.data.get(column, "") for column in columns],
        )
        for response in responses
    ]
    return ResponseTable(columns=columns, rows=rows)


def value_to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, dict)):
        return dumps_json(value)
    return str(value)


def to_csv(table: ResponseTable, delimiter: str = ",") -> str:
    output = io.StringIO()
    writer = csv.writer(output, delimiter=delimiter)
    writer.writerow(table.headers)
    writer.writerows(
        [row.date, *(value_to_text(cell) for cell in row.cells)] for row in table.rows
    )
    return output.getvalue()
