import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from fsbrowse.api import files
from fsbrowse.core.config import Settings, settings as default_settings
from fsbrowse.core.sandbox import Sandbox

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Configure logging based on debug setting
        logging.basicConfig(
            level=logging.DEBUG if settings.debug else logging.INFO,
            format="%(asctime)s %(levelname)-8s %(name)s: %(message)s" if settings.debug
            else "%(levelname)-8s %(name)s: %(message)s",
        )

        settings.base_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Serving {app.state.sandbox.root} at {settings.base_path or '/'}")

        yield

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.sandbox = Sandbox.from_directory(settings.base_dir)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_prefix = f"{settings.base_path}/api"
    app.include_router(files.router, prefix=api_prefix, tags=["files"])

    @app.get(f"{api_prefix}/health")
    async def health():
        return {"status": "ok", "app": settings.app_name}

    # No UI is served; the root and the bare mount prefix land on the root listing
    @app.get("/", include_in_schema=False)
    async def redirect_to_listing():
        return RedirectResponse(f"{api_prefix}/list/")

    if settings.base_path:
        app.add_api_route(settings.base_path, redirect_to_listing, include_in_schema=False)

    return app


app = create_app()
