"""Client for the hosted backend's REST, storage and auth APIs."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import httpx

from ..errors import BackendError, ConfigurationError
from .base import AuthSession, AuthUser, Backend, Row

logger = logging.getLogger(__name__)


def _filter_value(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if value is None:
        return 'null'
    return str(value)


class HostedBackend(Backend):
    """Backend that talks to a Supabase-compatible project over HTTPS.

    Table calls go to ``/rest/v1``, object storage to ``/storage/v1`` and
    sessions to ``/auth/v1``. The public API key is sent on every request;
    the bearer token is the key itself until :meth:`with_access_token`
    scopes a copy to a signed-in user.
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        client: httpx.Client | None = None,
        access_token: str | None = None,
    ):
        if not url or not anon_key:
            raise ConfigurationError(
                'Missing backend URL or API key. Please check your .env file.'
            )
        self.url = url.rstrip('/')
        self.anon_key = anon_key
        self.access_token = access_token
        self._owns_client = client is None
        self.client = client or httpx.Client()

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    def _headers(self, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        headers = {
            'apikey': self.anon_key,
            'Authorization': f'Bearer {self.access_token or self.anon_key}',
        }
        if extra:
            headers.update(extra)
        return headers

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        headers = self._headers(kwargs.pop('headers', None))
        try:
            response = self.client.request(
                method, f'{self.url}{path}', headers=headers, **kwargs
            )
        except httpx.HTTPError as exc:
            logger.error('%s %s failed: %s', method, path, exc)
            raise BackendError(str(exc) or None) from exc

        if response.is_error:
            try:
                payload: Any = response.json()
            except ValueError:
                payload = response.text
            raise BackendError.from_payload(payload, status_code=response.status_code)
        return response

    # ------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------

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
        params: list[tuple[str, str]] = [('select', ','.join(columns or ['*']))]
        for column, value in (filters or {}).items():
            params.append((column, f'eq.{_filter_value(value)}'))
        if order_by:
            params.append(('order', f'{order_by}.{"desc" if descending else "asc"}'))
        if limit is not None:
            params.append(('limit', str(limit)))
        response = self._send('GET', f'/rest/v1/{table}', params=params)
        return list(response.json())

    def select_one(
        self, table: str, row_id: str, columns: Sequence[str] | None = None
    ) -> Row | None:
        rows = self.select(table, columns=columns, filters={'id': row_id}, limit=1)
        return rows[0] if rows else None

    def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        response = self._send(
            'POST',
            f'/rest/v1/{table}',
            json=dict(row),
            headers={'Prefer': 'return=representation'},
        )
        rows = response.json()
        if not rows:
            raise BackendError(f'Insert into {table} returned no row')
        return rows[0]

    def update(self, table: str, row_id: str, fields: Mapping[str, Any]) -> None:
        self._send(
            'PATCH',
            f'/rest/v1/{table}',
            params={'id': f'eq.{row_id}'},
            json=dict(fields),
            headers={'Prefer': 'return=minimal'},
        )

    def delete(self, table: str, row_id: str) -> None:
        self._send('DELETE', f'/rest/v1/{table}', params={'id': f'eq.{row_id}'})

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def upload(
        self, bucket: str, path: str, content: bytes, content_type: str
    ) -> None:
        self._send(
            'POST',
            f'/storage/v1/object/{bucket}/{path}',
            content=content,
            headers={'Content-Type': content_type, 'x-upsert': 'false'},
        )

    def public_url(self, bucket: str, path: str) -> str:
        return f'{self.url}/storage/v1/object/public/{bucket}/{path}'

    def remove(self, bucket: str, paths: Sequence[str]) -> None:
        if not paths:
            return
        self._send(
            'DELETE', f'/storage/v1/object/{bucket}', json={'prefixes': list(paths)}
        )

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def sign_in(self, email: str, password: str) -> AuthSession:
        response = self._send(
            'POST',
            '/auth/v1/token',
            params={'grant_type': 'password'},
            json={'email': email, 'password': password},
        )
        body = response.json()
        user = body.get('user') or {}
        return AuthSession(
            access_token=body['access_token'],
            user=AuthUser(id=str(user.get('id', '')), email=user.get('email', email)),
            expires_in=body.get('expires_in'),
        )

    def sign_out(self, access_token: str) -> None:
        self._send(
            'POST',
            '/auth/v1/logout',
            headers={'Authorization': f'Bearer {access_token}'},
        )

    def get_user(self, access_token: str) -> AuthUser | None:
        try:
            response = self._send(
                'GET',
                '/auth/v1/user',
                headers={'Authorization': f'Bearer {access_token}'},
            )
        except BackendError as exc:
            if exc.status_code in (401, 403):
                return None
            raise
        body = response.json()
        return AuthUser(id=str(body.get('id', '')), email=body.get('email', ''))

    def with_access_token(self, access_token: str) -> HostedBackend:
        return HostedBackend(
            self.url, self.anon_key, client=self.client, access_token=access_token
        )

    def close(self) -> None:
        if self._owns_client:
            self.client.close()
