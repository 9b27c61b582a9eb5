"""Content records, editable inputs and small text helpers."""

import dataclasses
import datetime
import mimetypes
import os
from typing import Annotated

import pydantic
import sqlmodel


def utc_now_iso() -> str:
    """Current time as an ISO-8601 UTC timestamp."""
    return datetime.datetime.now(datetime.UTC).isoformat()


def split_highlights(text: str) -> list[str]:
    """Split comma-separated highlights, dropping blanks."""
    return [item.strip() for item in text.split(',') if item.strip()]


def join_highlights(items: list[str]) -> str:
    return ','.join(items)


def paragraphs(text: str) -> list[str]:
    """Split body text into paragraphs on newlines."""
    return [line.strip() for line in text.split('\n') if line.strip()]


def _coerce_highlights(value: object) -> object:
    if isinstance(value, str):
        return split_highlights(value)
    return value


# Highlights arrive either as a list or as comma-separated editor text.
Highlights = Annotated[list[str], pydantic.BeforeValidator(_coerce_highlights)]


@dataclasses.dataclass(frozen=True)
class ImageFile:
    """An image selected for upload."""

    filename: str
    content: bytes
    content_type: str = 'application/octet-stream'

    @property
    def extension(self) -> str:
        """Original file extension, lower-cased and without the dot."""
        ext = os.path.splitext(self.filename)[1].lstrip('.').lower()
        if ext:
            return ext
        guessed = mimetypes.guess_extension(self.content_type or '')
        return guessed.lstrip('.') if guessed else 'bin'


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


class Location(sqlmodel.SQLModel):
    """Where an attraction is."""

    latitude: float = 0.0
    longitude: float = 0.0
    address: str = ''


class AttractionInput(sqlmodel.SQLModel):
    """Editable fields of an attraction."""

    name: str = ''
    description: str = ''
    short_description: str = ''
    location: Location = sqlmodel.Field(default_factory=Location)
    category: str = ''
    difficulty: str = ''
    duration: str = ''
    accessibility: str = ''
    highlights: Highlights = sqlmodel.Field(default_factory=list)
    best_time: str = ''
    featured: bool = False


class Attraction(AttractionInput):
    """A natural, historical or recreational site."""

    id: str
    image_url: str = ''
    created_at: datetime.datetime
    updated_at: datetime.datetime


class NewsArticleInput(sqlmodel.SQLModel):
    """Editable fields of a news article."""

    title: str = ''
    content: str = ''
    excerpt: str = ''
    category: str = ''
    author: str = ''
    publish_date: str = ''
    featured: bool = False


class NewsArticle(NewsArticleInput):
    """A news or events article."""

    id: str
    image_url: str = ''
    created_at: datetime.datetime
    updated_at: datetime.datetime

    @property
    def paragraphs(self) -> list[str]:
        return paragraphs(self.content)


class GalleryItemInput(sqlmodel.SQLModel):
    """Editable fields of a gallery photo."""

    title: str = ''
    description: str = ''
    category: str = ''


class GalleryItem(GalleryItemInput):
    """A photo in the public gallery."""

    id: str
    image_url: str = ''
    created_at: datetime.datetime
    updated_at: datetime.datetime


class CulturalItemInput(sqlmodel.SQLModel):
    """Editable fields of a cultural item."""

    title: str = ''
    description: str = ''
    category: str = ''
    is_featured: bool = False


class CulturalItem(CulturalItemInput):
    """A tradition, craft, festival or dish."""

    id: str
    image_url: str = ''
    created_at: datetime.datetime
    updated_at: datetime.datetime

    @property
    def paragraphs(self) -> list[str]:
        return paragraphs(self.description)


class ItineraryInput(sqlmodel.SQLModel):
    """Editable fields of a suggested itinerary."""

    title: str = ''
    description: str = ''
    duration: str = ''
    difficulty: str = ''
    highlights: Highlights = sqlmodel.Field(default_factory=list)


class Itinerary(ItineraryInput):
    """A suggested visit plan."""

    id: str
    created_at: datetime.datetime
    updated_at: datetime.datetime


class ContactMessageInput(sqlmodel.SQLModel):
    """What a visitor submits through the contact form."""

    name: str
    email: str
    subject: str
    message: str


class ContactMessage(ContactMessageInput):
    """A stored visitor inquiry. Only the read flag ever changes."""

    id: str
    read: bool = False
    created_at: datetime.datetime
