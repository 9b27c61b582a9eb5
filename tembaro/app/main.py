"""Visit Tembaro application: public content API and admin API."""

import contextlib
import logging
from collections.abc import AsyncGenerator

import fastapi
import fastapi.staticfiles
import uvicorn

import common.app

from . import config
from .admin import routes as admin_routes
from .backend.client import BackendProvider
from .content import routes as content_routes

logger = logging.getLogger(__name__)


def create_tembaro_app(provider: BackendProvider | None = None) -> fastapi.FastAPI:
    """Build the application around a backend provider."""
    provider = provider or BackendProvider()

    @contextlib.asynccontextmanager
    async def lifespan(app: fastapi.FastAPI) -> AsyncGenerator[None, None]:
        """Connect the backend on startup so misconfiguration fails fast."""
        provider.get()
        settings = provider.settings
        if settings.mode == config.LOCAL and settings.public_base_url.startswith('/'):
            app.mount(
                settings.public_base_url,
                fastapi.staticfiles.StaticFiles(directory=settings.uploads_dir),
                name='uploads',
            )
        logger.info('Backend ready (%s mode)', settings.mode)
        yield
        provider.close()

    app = common.app.create_app(
        'Visit Tembaro',
        routers=(content_routes.public_router, admin_routes.admin_router),
        lifespan=lifespan,
    )
    app.state.backend_provider = provider
    return app


app = create_tembaro_app()

if __name__ == '__main__':
    uvicorn.run(app, host='0.0.0.0', port=8000)
