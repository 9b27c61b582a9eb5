"""Construction of the process-wide backend handle."""

import logging
import os
from collections.abc import Callable

import fastapi

from .. import config
from .base import Backend
from .hosted import HostedBackend
from .local import LocalBackend, create_engine

logger = logging.getLogger(__name__)


def create_backend(settings: config.BackendSettings) -> Backend:
    """Build the backend selected by settings."""
    if settings.mode == config.LOCAL:
        os.makedirs(settings.data_dir, exist_ok=True)
        logger.info('Using local backend in %s', settings.data_dir)
        return LocalBackend(
            create_engine(settings.database_url),
            settings.uploads_dir,
            public_base_url=settings.public_base_url,
            admin_email=settings.admin_email,
            admin_password=settings.admin_password,
        )
    logger.info('Using hosted backend at %s', settings.url)
    return HostedBackend(settings.url, settings.anon_key)


class BackendProvider:
    """Lazily builds one backend from settings and hands it out on request."""

    def __init__(
        self,
        loader: Callable[[], config.BackendSettings] = config.BackendSettings.from_env,
        factory: Callable[[config.BackendSettings], Backend] = create_backend,
    ):
        self._loader = loader
        self._factory = factory
        self._settings: config.BackendSettings | None = None
        self._backend: Backend | None = None

    @property
    def settings(self) -> config.BackendSettings:
        if self._settings is None:
            self._settings = self._loader()
        return self._settings

    def get(self) -> Backend:
        """Return the backend, constructing it on first use."""
        if self._backend is None:
            self._backend = self._factory(self.settings)
        return self._backend

    def close(self) -> None:
        if self._backend is not None:
            self._backend.close()
            self._backend = None


def get_backend(request: fastapi.Request) -> Backend:
    """Request dependency: the application's backend."""
    provider: BackendProvider = request.app.state.backend_provider
    return provider.get()
