from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mea_dashboard.application.live import ChangeFeed
from mea_dashboard.infrastructure.config import get_settings
from mea_dashboard.web.routes import api


def create_application() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app.title,
        version=settings.app.version,
        debug=settings.app.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # one feed per app so every repository built for a request shares subscribers
    app.state.change_feed = ChangeFeed()

    app.include_router(api.router)

    return app


app = create_application()
