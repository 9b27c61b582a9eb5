"""Error types shared by the backend, services and forms."""

from collections.abc import Mapping
from typing import Any

from common.settings import ConfigurationError

__all__ = [
    'BackendError',
    'ConfigurationError',
    'ContentError',
    'InvalidInputError',
    'FALLBACK_MESSAGE',
]

FALLBACK_MESSAGE = 'An error occurred with the database'


class ContentError(Exception):
    """Base class for errors surfaced to content editors."""


class InvalidInputError(ContentError):
    """Input rejected locally, before any backend call."""


class BackendError(ContentError):
    """A failed call to the database, storage or auth backend."""

    def __init__(
        self,
        message: str | None = None,
        *,
        details: str | None = None,
        hint: str | None = None,
        code: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.message = message
        self.details = details
        self.hint = hint
        self.code = code
        self.status_code = status_code
        super().__init__(message or details or hint or FALLBACK_MESSAGE)

    @classmethod
    def from_payload(
        cls, payload: Any, status_code: int | None = None
    ) -> 'BackendError':
        """Build an error from a provider error body.

        The database API reports ``message``/``details``/``hint``/``code``; the
        auth API uses ``msg`` or ``error_description`` for the message.
        """
        if not isinstance(payload, Mapping):
            text = str(payload).strip() if payload else None
            return cls(text or None, status_code=status_code)

        def _text(*keys: str) -> str | None:
            for key in keys:
                value = payload.get(key)
                if value:
                    return str(value)
            return None

        code = payload.get('code') or payload.get('error')
        return cls(
            _text('message', 'msg', 'error_description'),
            details=_text('details'),
            hint=_text('hint'),
            code=str(code) if code is not None else None,
            status_code=status_code,
        )
