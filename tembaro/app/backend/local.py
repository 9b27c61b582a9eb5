"""Self-contained backend: SQLite tables plus an upload directory.

Mirrors the hosted schema closely enough that services cannot tell the two
apart, which makes it the backend for local development and for tests.
"""

from __future__ import annotations

import logging
import os
import secrets
import uuid
from collections.abc import Mapping, Sequence
from typing import Any

import sqlalchemy
import sqlmodel

from ..errors import BackendError
from .base import AuthSession, AuthUser, Backend, Row

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


def _json_column() -> Any:
    return sqlalchemy.Column(sqlalchemy.JSON, nullable=False)


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


class AttractionRow(sqlmodel.SQLModel, table=True):
    """Row in the attractions table."""

    __tablename__ = 'attractions'  # type: ignore[misc]

    id: str = sqlmodel.Field(default_factory=_new_id, primary_key=True)
    name: str = ''
    description: str = ''
    short_description: str = ''
    image_url: str = ''
    location: dict[str, Any] = sqlmodel.Field(
        default_factory=dict, sa_column=_json_column()
    )
    category: str = sqlmodel.Field(default='', index=True)
    difficulty: str = ''
    duration: str = ''
    accessibility: str = ''
    highlights: list[str] = sqlmodel.Field(
        default_factory=list, sa_column=_json_column()
    )
    best_time: str = ''
    featured: bool = False
    created_at: str = sqlmodel.Field(default='', index=True)
    updated_at: str = ''


class NewsRow(sqlmodel.SQLModel, table=True):
    """Row in the news table."""

    __tablename__ = 'news'  # type: ignore[misc]

    id: str = sqlmodel.Field(default_factory=_new_id, primary_key=True)
    title: str = ''
    content: str = ''
    excerpt: str = ''
    image_url: str = ''
    category: str = sqlmodel.Field(default='', index=True)
    author: str = ''
    publish_date: str = ''
    featured: bool = False
    created_at: str = sqlmodel.Field(default='', index=True)
    updated_at: str = ''


class GalleryRow(sqlmodel.SQLModel, table=True):
    """Row in the gallery table."""

    __tablename__ = 'gallery'  # type: ignore[misc]

    id: str = sqlmodel.Field(default_factory=_new_id, primary_key=True)
    title: str = ''
    description: str = ''
    image_url: str = ''
    category: str = sqlmodel.Field(default='', index=True)
    created_at: str = sqlmodel.Field(default='', index=True)
    updated_at: str = ''


class CulturalItemRow(sqlmodel.SQLModel, table=True):
    """Row in the cultural_items table."""

    __tablename__ = 'cultural_items'  # type: ignore[misc]

    id: str = sqlmodel.Field(default_factory=_new_id, primary_key=True)
    title: str = ''
    description: str = ''
    image_url: str = ''
    category: str = ''
    is_featured: bool = False
    created_at: str = sqlmodel.Field(default='', index=True)
    updated_at: str = ''


class ItineraryRow(sqlmodel.SQLModel, table=True):
    """Row in the itineraries table."""

    __tablename__ = 'itineraries'  # type: ignore[misc]

    id: str = sqlmodel.Field(default_factory=_new_id, primary_key=True)
    title: str = ''
    description: str = ''
    duration: str = ''
    difficulty: str = ''
    highlights: list[str] = sqlmodel.Field(
        default_factory=list, sa_column=_json_column()
    )
    created_at: str = sqlmodel.Field(default='', index=True)
    updated_at: str = ''


class ContactMessageRow(sqlmodel.SQLModel, table=True):
    """Row in the contact_messages table."""

    __tablename__ = 'contact_messages'  # type: ignore[misc]

    id: str = sqlmodel.Field(default_factory=_new_id, primary_key=True)
    name: str = ''
    email: str = ''
    subject: str = ''
    message: str = ''
    read: bool = False
    created_at: str = sqlmodel.Field(default='', index=True)


TABLES: dict[str, type[sqlmodel.SQLModel]] = {
    'attractions': AttractionRow,
    'news': NewsRow,
    'gallery': GalleryRow,
    'cultural_items': CulturalItemRow,
    'itineraries': ItineraryRow,
    'contact_messages': ContactMessageRow,
}

BUCKETS = ('attractions', 'news', 'gallery', 'cultural')


def create_engine(database_url: str) -> sqlalchemy.Engine:
    """Create an engine and make sure every table exists."""
    engine = sqlmodel.create_engine(
        database_url, connect_args={'check_same_thread': False}
    )
    sqlmodel.SQLModel.metadata.create_all(engine)
    return engine


# ---------------------------------------------------------------------------
# Backend
# ---------------------------------------------------------------------------


class LocalBackend(Backend):
    """Backend over a SQL engine and a directory of uploaded objects."""

    def __init__(
        self,
        engine: sqlalchemy.Engine,
        upload_dir: str,
        public_base_url: str = '/uploads',
        admin_email: str = '',
        admin_password: str = '',
    ):
        self.engine = engine
        self.upload_dir = upload_dir
        self.public_base_url = public_base_url.rstrip('/')
        self.admin_email = admin_email
        self.admin_password = admin_password
        self._sessions: dict[str, AuthUser] = {}
        os.makedirs(upload_dir, exist_ok=True)

    # ------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------

    def _model(self, table: str) -> type[sqlmodel.SQLModel]:
        model = TABLES.get(table)
        if model is None:
            raise BackendError(
                f'relation "public.{table}" does not exist', code='42P01'
            )
        return model

    def _check_columns(
        self, table: str, model: type[sqlmodel.SQLModel], names: Sequence[str]
    ) -> None:
        for name in names:
            if name not in model.model_fields:
                raise BackendError(
                    f"Could not find the '{name}' column of '{table}'",
                    code='PGRST204',
                )

    def _row(self, obj: sqlmodel.SQLModel, columns: Sequence[str] | None) -> Row:
        row = obj.model_dump()
        if columns:
            return {name: row[name] for name in columns}
        return row

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
        model = self._model(table)
        filters = filters or {}
        self._check_columns(table, model, [*(columns or []), *filters])
        statement = sqlmodel.select(model)
        for column, value in filters.items():
            statement = statement.where(getattr(model, column) == value)
        if order_by:
            self._check_columns(table, model, [order_by])
            order_column = getattr(model, order_by)
            statement = statement.order_by(
                order_column.desc() if descending else order_column.asc()
            )
        if limit is not None:
            statement = statement.limit(limit)
        with sqlmodel.Session(self.engine) as session:
            return [self._row(obj, columns) for obj in session.exec(statement).all()]

    def select_one(
        self, table: str, row_id: str, columns: Sequence[str] | None = None
    ) -> Row | None:
        model = self._model(table)
        self._check_columns(table, model, columns or [])
        with sqlmodel.Session(self.engine) as session:
            obj = session.get(model, row_id)
            return self._row(obj, columns) if obj is not None else None

    def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        model = self._model(table)
        self._check_columns(table, model, list(row))
        obj = model(**row)
        with sqlmodel.Session(self.engine) as session:
            session.add(obj)
            session.commit()
            session.refresh(obj)
            return self._row(obj, None)

    def update(self, table: str, row_id: str, fields: Mapping[str, Any]) -> None:
        model = self._model(table)
        self._check_columns(table, model, list(fields))
        with sqlmodel.Session(self.engine) as session:
            obj = session.get(model, row_id)
            if obj is None:
                return
            for name, value in fields.items():
                setattr(obj, name, value)
            session.add(obj)
            session.commit()

    def delete(self, table: str, row_id: str) -> None:
        model = self._model(table)
        with sqlmodel.Session(self.engine) as session:
            obj = session.get(model, row_id)
            if obj is None:
                return
            session.delete(obj)
            session.commit()

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def _object_path(self, bucket: str, path: str) -> str:
        if bucket not in BUCKETS:
            raise BackendError('Bucket not found', code='404')
        if os.path.isabs(path) or '..' in path.split('/'):
            raise BackendError(f'Invalid key: {path}', code='InvalidKey')
        return os.path.join(self.upload_dir, bucket, path)

    def upload(
        self, bucket: str, path: str, content: bytes, content_type: str
    ) -> None:
        file_path = self._object_path(bucket, path)
        if os.path.exists(file_path):
            raise BackendError('The resource already exists', code='Duplicate')
        os.makedirs(os.path.dirname(file_path), exist_ok=True)
        try:
            with open(file_path, 'wb') as f:
                f.write(content)
        except OSError as exc:
            raise BackendError(str(exc)) from exc

    def public_url(self, bucket: str, path: str) -> str:
        return f'{self.public_base_url}/{bucket}/{path}'

    def remove(self, bucket: str, paths: Sequence[str]) -> None:
        for path in paths:
            file_path = self._object_path(bucket, path)
            if os.path.exists(file_path):
                try:
                    os.remove(file_path)
                except OSError as exc:
                    raise BackendError(str(exc)) from exc

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def sign_in(self, email: str, password: str) -> AuthSession:
        if not self.admin_email or not (
            secrets.compare_digest(
                email.lower().encode(), self.admin_email.lower().encode()
            )
            and secrets.compare_digest(password.encode(), self.admin_password.encode())
        ):
            raise BackendError(
                'Invalid login credentials', code='invalid_grant', status_code=400
            )
        token = secrets.token_urlsafe(32)
        user = AuthUser(id='local-admin', email=self.admin_email)
        self._sessions[token] = user
        logger.info('Signed in %s', user.email)
        return AuthSession(access_token=token, user=user)

    def sign_out(self, access_token: str) -> None:
        self._sessions.pop(access_token, None)

    def get_user(self, access_token: str) -> AuthUser | None:
        return self._sessions.get(access_token)

    def with_access_token(self, access_token: str) -> LocalBackend:
        return self

    def close(self) -> None:
        self.engine.dispose()
