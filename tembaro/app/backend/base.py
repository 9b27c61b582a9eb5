"""Abstract contract for the hosted database, object storage and auth backend."""

from __future__ import annotations

import abc
import dataclasses
from collections.abc import Mapping, Sequence
from typing import Any

Row = dict[str, Any]


@dataclasses.dataclass(frozen=True)
class AuthUser:
    """An authenticated administrator."""

    id: str
    email: str


@dataclasses.dataclass(frozen=True)
class AuthSession:
    """A signed-in session issued by the backend."""

    access_token: str
    user: AuthUser
    expires_in: int | None = None


class Backend(abc.ABC):
    """Table-per-entity CRUD, bucket storage and session auth.

    Every method raises :class:`tembaro.app.errors.BackendError` on failure.
    Rows are plain dicts exactly as the backend stores them; callers own the
    conversion to typed records.
    """

    # ------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------

    @abc.abstractmethod
    def select(
        self,
        table: str,
        *,
        columns: Sequence[str] | None = None,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = True,
        limit: int | None = None,
    ) -> list[Row]:
        """Return rows matching every equality filter."""

    @abc.abstractmethod
    def select_one(
        self, table: str, row_id: str, columns: Sequence[str] | None = None
    ) -> Row | None:
        """Return the row with the given id, or None if there is none."""

    @abc.abstractmethod
    def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        """Insert a row and return it as stored, including its assigned id."""

    @abc.abstractmethod
    def update(self, table: str, row_id: str, fields: Mapping[str, Any]) -> None:
        """Overwrite the given fields of one row."""

    @abc.abstractmethod
    def delete(self, table: str, row_id: str) -> None:
        """Delete one row. Deleting a missing row is not an error."""

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    @abc.abstractmethod
    def upload(
        self, bucket: str, path: str, content: bytes, content_type: str
    ) -> None:
        """Store an object; fails if the path is already taken."""

    @abc.abstractmethod
    def public_url(self, bucket: str, path: str) -> str:
        """Return the directly fetchable address of a stored object."""

    @abc.abstractmethod
    def remove(self, bucket: str, paths: Sequence[str]) -> None:
        """Remove stored objects. Missing objects are ignored."""

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    @abc.abstractmethod
    def sign_in(self, email: str, password: str) -> AuthSession:
        """Exchange credentials for a session."""

    @abc.abstractmethod
    def sign_out(self, access_token: str) -> None:
        """Invalidate a session."""

    @abc.abstractmethod
    def get_user(self, access_token: str) -> AuthUser | None:
        """Resolve a session token to its user, or None if it is not valid."""

    @abc.abstractmethod
    def with_access_token(self, access_token: str) -> Backend:
        """Return a handle whose calls run as the given session's user."""

    def close(self) -> None:
        """Release network or database resources."""
