from __future__ import annotations

from fastapi import FastAPI

from formsync.config import Settings
from formsync.routes.api import router as api_router
from formsync.storage import init_storage


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()
    storage = init_storage(settings)

    app = FastAPI(
        openapi_tags=[
            {"name": "api/forms", "description": "REST API: forms"},
            {"name": "api/responses", "description": "REST API: responses"},
        ]
    )

    app.state.storage = storage
    app.state.settings = settings

    app.include_router(api_router)

    return app
