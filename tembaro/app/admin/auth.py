"""Editor session state over the backend's auth service."""

import logging
from collections.abc import Callable

from common.log import log_backend_error

from ..backend.base import AuthSession, AuthUser, Backend
from ..errors import BackendError

logger = logging.getLogger(__name__)

SIGNED_IN = 'SIGNED_IN'
SIGNED_OUT = 'SIGNED_OUT'

LOADING = 'loading'
LOGIN = 'login'
DASHBOARD = 'dashboard'

Listener = Callable[[str, AuthSession | None], None]


class AuthProvider:
    """Tracks the signed-in editor and tells subscribers when that changes."""

    def __init__(self, backend: Backend):
        self.backend = backend
        self.session: AuthSession | None = None
        self.loading = True
        self._listeners: list[Listener] = []

    @property
    def user(self) -> AuthUser | None:
        return self.session.user if self.session is not None else None

    @property
    def gate(self) -> str:
        """Which admin screen to show."""
        if self.loading:
            return LOADING
        return DASHBOARD if self.user is not None else LOGIN

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; the returned callable unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: str) -> None:
        for listener in list(self._listeners):
            listener(event, self.session)

    def restore(self, access_token: str | None) -> AuthUser | None:
        """Resume a session from a stored token, if it is still valid."""
        user = None
        try:
            if access_token:
                user = self.backend.get_user(access_token)
        except BackendError as exc:
            log_backend_error(logger, 'restoring session', exc)
        finally:
            self.loading = False
        if user is None:
            self.session = None
            return None
        self.session = AuthSession(access_token=access_token or '', user=user)
        self._emit(SIGNED_IN)
        return user

    def sign_in(self, email: str, password: str) -> AuthSession:
        try:
            session = self.backend.sign_in(email, password)
        except BackendError as exc:
            log_backend_error(logger, 'signing in', exc)
            raise
        finally:
            self.loading = False
        self.session = session
        logger.info('Editor %s signed in', session.user.email)
        self._emit(SIGNED_IN)
        return session

    def sign_out(self) -> None:
        """End the session. Local state is cleared even if the backend call fails."""
        session, self.session = self.session, None
        if session is not None:
            try:
                self.backend.sign_out(session.access_token)
            except BackendError as exc:
                log_backend_error(logger, 'signing out', exc)
        self._emit(SIGNED_OUT)

    def scoped_backend(self) -> Backend:
        """The backend acting as the signed-in editor."""
        if self.session is None:
            return self.backend
        return self.backend.with_access_token(self.session.access_token)
