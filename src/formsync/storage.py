from __future__ import annotations

from formsync.config import Settings, ensure_dirs
from formsync.protocols import Storage
from formsync.repo_json import JSONStorage
from formsync.repo_sqlite import SQLiteStorage


def init_storage(settings: Settings) -> Storage:
    ensure_dirs(settings)
    if settings.storage_backend == "json":
        return JSONStorage(settings.json_path)
    return SQLiteStorage(settings.sqlite_path)
