"""FastAPI application factory. No business logic; only wiring and middleware.

Run with:
  uvicorn vidtube.main:create_app --factory
"""

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from vidtube.api.v1 import router as v1_router
from vidtube.core.config import APP_VERSION, Settings, get_settings
from vidtube.core.database import build_engine, build_session_factory
from vidtube.core.errors import register_exception_handlers
from vidtube.core.logging import configure_logging
from vidtube.services.media import LocalMediaStorage, MediaStorage, build_media_storage


def create_app(
    settings: Settings | None = None,
    media_storage: MediaStorage | None = None,
) -> FastAPI:
    """
    Build an application bound to its own settings, engine and media storage.

    Everything request handlers need lives on app.state; nothing is shared
    through module globals, so several apps can coexist (e.g. in tests).
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Vidtube API",
        version=APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    engine = build_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.media_storage = media_storage or build_media_storage(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    if isinstance(app.state.media_storage, LocalMediaStorage):
        app.mount(
            settings.MEDIA_URL_PREFIX,
            StaticFiles(directory=app.state.media_storage.root, check_dir=False),
            name="media",
        )

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Vidtube API", "docs": "/docs"}

    return app
