from __future__ import annotations

import os
from pathlib import Path

ANONYMOUS_WORKSPACE = "anonymous"
SIDEBAR_KEY = "showSidebar"


class Settings:
    def __init__(self) -> None:
        self.storage_backend = os.getenv("STORAGE_BACKEND", "sqlite").lower()
        self.sqlite_path = Path(os.getenv("SQLITE_PATH", "./data/app.db"))
        self.json_path = Path(os.getenv("JSON_PATH", "./data/jsonstore.json"))
        self.prefs_path = Path(os.getenv("PREFS_PATH", "./data/prefs.json"))
        self.api_base_url = os.getenv("API_BASE_URL", "http://127.0.0.1:8000")
        self.public_host = os.getenv("PUBLIC_HOST", "localhost:8000")
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.host = os.getenv("HOST", "0.0.0.0")
        port_value = os.getenv("PORT", "8000")
        try:
            self.port = int(port_value)
        except ValueError:
            self.port = 8000


def ensure_dirs(settings: Settings) -> None:
    settings.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
    settings.json_path.parent.mkdir(parents=True, exist_ok=True)
    settings.prefs_path.parent.mkdir(parents=True, exist_ok=True)
