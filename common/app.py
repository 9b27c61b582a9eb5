"""FastAPI app factory shared by the Tembaro services."""

from collections.abc import Iterable
from typing import Any

import fastapi

import common.log

health_router = fastapi.APIRouter(tags=['health'])


@health_router.api_route('/health', methods=['GET', 'HEAD'])
async def health() -> dict[str, str]:
    """Liveness probe for the container platform."""
    return {'status': 'healthy'}


def create_app(
    title: str,
    routers: Iterable[fastapi.APIRouter] = (),
    **kwargs: Any,
) -> fastapi.FastAPI:
    """Build an app with logging configured, /health mounted and `routers` included.

    Remaining keyword arguments go to FastAPI itself (lifespan, version, ...).
    """
    common.log.configure_logging()
    app = fastapi.FastAPI(title=title, **kwargs)
    app.include_router(health_router)
    for router in routers:
        app.include_router(router)
    return app
