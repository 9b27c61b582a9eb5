"""Entity services: CRUD over one backend table per content type.

Read paths never raise. ``fetch_*`` methods return a :class:`Result` so
callers that render an error banner can tell "empty" from "failed", and the
``list_*``/``get_by_id`` forms collapse a failure to an empty value. Write
paths log and re-raise so editors see an actionable message.

Replacing an image is a non-transactional two-step operation: the row is
written first, then the previous object is removed best-effort. A failed
removal leaves an orphaned object in storage and is only logged.
"""

import dataclasses
import logging
import time
from typing import Any, ClassVar, Generic, TypeVar

import pydantic
import sqlmodel

from common.log import log_backend_error

from ..backend.base import Backend, Row
from ..errors import BackendError, InvalidInputError
from . import models

logger = logging.getLogger(__name__)

V = TypeVar('V')
RecordT = TypeVar('RecordT', bound=sqlmodel.SQLModel)
InputT = TypeVar('InputT', bound=sqlmodel.SQLModel)


@dataclasses.dataclass(frozen=True)
class Result(Generic[V]):
    """Outcome of a read: a value, or the backend error that prevented it."""

    value: V | None = None
    error: BackendError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap_or(self, default: V) -> V:
        """Return the value, or default if the read failed."""
        if self.error is not None or self.value is None:
            return default
        return self.value


def storage_path(image_url: str | None) -> str | None:
    """Object key of a stored image, taken from the last segment of its URL."""
    if not image_url:
        return None
    path = image_url.split('?', 1)[0].rstrip('/').rsplit('/', 1)[-1]
    return path or None


class EntityService(Generic[RecordT, InputT]):
    """List, fetch, create, update and delete for one content type."""

    table: ClassVar[str]
    label: ClassVar[str]
    plural: ClassVar[str]
    record_type: type[RecordT]
    bucket: ClassVar[str | None] = None
    tracks_updates: ClassVar[bool] = True
    create_defaults: ClassVar[dict[str, Any]] = {}

    def __init__(self, backend: Backend):
        self.backend = backend

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _parse(self, row: Row) -> RecordT:
        try:
            return self.record_type.model_validate(row)
        except pydantic.ValidationError as exc:
            raise BackendError(
                f'Unexpected {self.label} row from backend', details=str(exc)
            ) from exc

    def _fetch(
        self,
        action: str,
        filters: dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> Result[list[RecordT]]:
        try:
            rows = self.backend.select(
                self.table,
                filters=filters,
                order_by='created_at',
                descending=True,
                limit=limit,
            )
            return Result([self._parse(row) for row in rows])
        except BackendError as exc:
            log_backend_error(logger, action, exc)
            return Result(error=exc)

    def fetch_all(self) -> Result[list[RecordT]]:
        """All rows, newest first."""
        return self._fetch(f'loading {self.plural}')

    def list_all(self) -> list[RecordT]:
        """All rows, or an empty list if the read failed."""
        return self.fetch_all().unwrap_or([])

    def fetch_by_id(self, row_id: str) -> Result[RecordT]:
        """One row by id; a missing row is an ok result with no value."""
        try:
            row = self.backend.select_one(self.table, row_id)
            return Result(self._parse(row) if row is not None else None)
        except BackendError as exc:
            log_backend_error(logger, f'loading {self.label} {row_id}', exc)
            return Result(error=exc)

    def get_by_id(self, row_id: str) -> RecordT | None:
        """One row by id, or None if it is missing or the read failed."""
        result = self.fetch_by_id(row_id)
        return result.value if result.ok else None

    def _fetch_flagged(self, column: str, limit: int) -> Result[list[RecordT]]:
        return self._fetch(
            f'loading featured {self.plural}', filters={column: True}, limit=max(limit, 0)
        )

    def _fetch_latest(self, limit: int) -> Result[list[RecordT]]:
        return self._fetch(f'loading latest {self.plural}', limit=max(limit, 0))

    def _fetch_category(self, category: str) -> Result[list[RecordT]]:
        """Rows whose category matches, ignoring case."""
        result = self._fetch(f'loading {self.plural} in {category!r}')
        if not result.ok:
            return result
        wanted = category.strip().casefold()
        return Result(
            [
                record
                for record in result.value or []
                if getattr(record, 'category', '').casefold() == wanted
            ]
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _upload(self, image: models.ImageFile) -> str:
        assert self.bucket is not None
        path = f'{int(time.time() * 1000)}.{image.extension}'
        self.backend.upload(self.bucket, path, image.content, image.content_type)
        return self.backend.public_url(self.bucket, path)

    def _current_image_url(self, row_id: str) -> str | None:
        row = self.backend.select_one(self.table, row_id, columns=['image_url'])
        return row.get('image_url') if row else None

    def _check_image(self, image: models.ImageFile | None, required: bool) -> None:
        if self.bucket is None and image is not None:
            raise InvalidInputError(f'{self.plural.capitalize()} do not take an image')
        if self.bucket is not None and required and image is None:
            raise InvalidInputError('Please select an image')

    def create(self, fields: InputT, image: models.ImageFile | None = None) -> str:
        """Insert a row (uploading its image first) and return the new id."""
        self._check_image(image, required=True)
        try:
            row = fields.model_dump(mode='json')
            row.update(self.create_defaults)
            if image is not None:
                row['image_url'] = self._upload(image)
            now = models.utc_now_iso()
            row['created_at'] = now
            if self.tracks_updates:
                row['updated_at'] = now
            stored = self.backend.insert(self.table, row)
        except BackendError as exc:
            log_backend_error(logger, f'creating {self.label}', exc)
            raise
        logger.info('Created %s %s', self.label, stored['id'])
        return str(stored['id'])

    def update(
        self, row_id: str, fields: InputT, image: models.ImageFile | None = None
    ) -> None:
        """Write the supplied fields, replacing the image if one is given."""
        self._check_image(image, required=False)
        old_image_url = None
        try:
            changes = fields.model_dump(mode='json', exclude_unset=True)
            if image is not None:
                old_image_url = self._current_image_url(row_id)
                changes['image_url'] = self._upload(image)
            changes['updated_at'] = models.utc_now_iso()
            self.backend.update(self.table, row_id, changes)
        except BackendError as exc:
            log_backend_error(logger, f'updating {self.label} {row_id}', exc)
            raise
        logger.info('Updated %s %s', self.label, row_id)

        old_path = storage_path(old_image_url)
        if old_path and self.bucket is not None:
            try:
                self.backend.remove(self.bucket, [old_path])
            except BackendError as exc:
                logger.warning(
                    'Could not remove replaced %s image %s: %s', self.label, old_path, exc
                )

    def delete(self, row_id: str) -> None:
        """Remove the row and its stored image."""
        try:
            if self.bucket is not None:
                path = storage_path(self._current_image_url(row_id))
                if path:
                    self.backend.remove(self.bucket, [path])
            self.backend.delete(self.table, row_id)
        except BackendError as exc:
            log_backend_error(logger, f'deleting {self.label} {row_id}', exc)
            raise
        logger.info('Deleted %s %s', self.label, row_id)


# ---------------------------------------------------------------------------
# Content types
# ---------------------------------------------------------------------------


class AttractionService(EntityService[models.Attraction, models.AttractionInput]):
    table = 'attractions'
    label = 'attraction'
    plural = 'attractions'
    record_type = models.Attraction
    bucket = 'attractions'

    def fetch_featured(self, limit: int = 3) -> Result[list[models.Attraction]]:
        """Up to `limit` featured attractions, newest first."""
        return self._fetch_flagged('featured', limit)

    def list_featured(self, limit: int = 3) -> list[models.Attraction]:
        """Featured attractions for the home page; empty on failure."""
        return self.fetch_featured(limit).unwrap_or([])


class NewsService(EntityService[models.NewsArticle, models.NewsArticleInput]):
    table = 'news'
    label = 'news article'
    plural = 'news articles'
    record_type = models.NewsArticle
    bucket = 'news'

    def fetch_featured(self, limit: int = 3) -> Result[list[models.NewsArticle]]:
        """Up to `limit` featured articles, newest first."""
        return self._fetch_flagged('featured', limit)

    def list_featured(self, limit: int = 3) -> list[models.NewsArticle]:
        """Featured articles; empty on failure."""
        return self.fetch_featured(limit).unwrap_or([])

    def fetch_latest(self, limit: int = 3) -> Result[list[models.NewsArticle]]:
        """The `limit` most recent articles, featured or not."""
        return self._fetch_latest(limit)

    def list_latest(self, limit: int = 3) -> list[models.NewsArticle]:
        """The most recent articles; empty on failure."""
        return self.fetch_latest(limit).unwrap_or([])

    def list_by_category(self, category: str) -> list[models.NewsArticle]:
        """Articles whose category matches, ignoring case."""
        return self._fetch_category(category).unwrap_or([])


class GalleryService(EntityService[models.GalleryItem, models.GalleryItemInput]):
    table = 'gallery'
    label = 'gallery item'
    plural = 'gallery items'
    record_type = models.GalleryItem
    bucket = 'gallery'

    def fetch_recent(self, limit: int = 8) -> Result[list[models.GalleryItem]]:
        return self._fetch_latest(limit)

    def list_recent(self, limit: int = 8) -> list[models.GalleryItem]:
        """The most recent images for the home page strip."""
        return self.fetch_recent(limit).unwrap_or([])

    def list_by_category(self, category: str) -> list[models.GalleryItem]:
        """Images whose category matches, ignoring case."""
        return self._fetch_category(category).unwrap_or([])


class CulturalService(EntityService[models.CulturalItem, models.CulturalItemInput]):
    table = 'cultural_items'
    label = 'cultural item'
    plural = 'cultural items'
    record_type = models.CulturalItem
    bucket = 'cultural'

    def fetch_featured(self, limit: int = 4) -> Result[list[models.CulturalItem]]:
        return self._fetch_flagged('is_featured', limit)

    def list_featured(self, limit: int = 4) -> list[models.CulturalItem]:
        """Featured cultural items; empty on failure."""
        return self.fetch_featured(limit).unwrap_or([])


class ItineraryService(EntityService[models.Itinerary, models.ItineraryInput]):
    table = 'itineraries'
    label = 'itinerary'
    plural = 'itineraries'
    record_type = models.Itinerary


class ContactService(EntityService[models.ContactMessage, models.ContactMessageInput]):
    table = 'contact_messages'
    label = 'message'
    plural = 'messages'
    record_type = models.ContactMessage
    tracks_updates = False
    create_defaults = {'read': False}

    def list_unread(self) -> list[models.ContactMessage]:
        """Messages not yet opened in the dashboard, newest first."""
        return self._fetch('loading unread messages', filters={'read': False}).unwrap_or(
            []
        )

    def update(
        self,
        row_id: str,
        fields: models.ContactMessageInput,
        image: models.ImageFile | None = None,
    ) -> None:
        """Messages are read-only apart from the read flag."""
        raise InvalidInputError('Contact messages cannot be edited')

    def mark_as_read(self, row_id: str) -> None:
        """Set the read flag. Marking an already-read message is a no-op."""
        try:
            self.backend.update(self.table, row_id, {'read': True})
        except BackendError as exc:
            log_backend_error(logger, f'marking message {row_id} as read', exc)
            raise


class ContentServices:
    """One service per content type, sharing a backend handle."""

    def __init__(self, backend: Backend):
        self.backend = backend
        self.attractions = AttractionService(backend)
        self.news = NewsService(backend)
        self.gallery = GalleryService(backend)
        self.cultural = CulturalService(backend)
        self.itineraries = ItineraryService(backend)
        self.contact = ContactService(backend)
