"""Editor forms: typed field state, setters and a submit that reports back.

A form is seeded from an existing record (edit mode) or from defaults
(create mode). ``submit`` never raises for content errors; it returns a
:class:`Notification` and leaves the state in place so the editor can
correct it and try again.
"""

import dataclasses
import datetime
import logging
from collections.abc import Callable, Mapping
from typing import Any, ClassVar, Generic, TypeVar

import sqlmodel

from ..errors import ContentError, InvalidInputError
from . import models, services

logger = logging.getLogger(__name__)

SUCCESS = 'default'
DESTRUCTIVE = 'destructive'

ATTRACTION_CATEGORIES = ('natural', 'historical', 'recreational', 'cultural')
NEWS_CATEGORIES = ('events', 'announcements', 'tourism', 'culture')
GALLERY_CATEGORIES = (
    'nature',
    'culture',
    'events',
    'people',
    'architecture',
    'landscape',
)
CULTURE_CATEGORIES = ('tradition', 'festival', 'craft', 'music', 'dance', 'food')

_TRUE_VALUES = frozenset({'1', 'true', 'on', 'yes'})
# Setter names that do not correspond to a submitted field.
_NOT_FIELDS = frozenset({'text', 'image'})


@dataclasses.dataclass(frozen=True)
class Notification:
    """A toast shown to the editor after an action."""

    title: str
    description: str
    variant: str = SUCCESS

    @classmethod
    def success(cls, description: str) -> 'Notification':
        return cls('Success', description)

    @classmethod
    def error(cls, description: str) -> 'Notification':
        return cls('Error', description, DESTRUCTIVE)

    @property
    def ok(self) -> bool:
        return self.variant != DESTRUCTIVE


def parse_checkbox(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


# ---------------------------------------------------------------------------
# Field state
# ---------------------------------------------------------------------------


@dataclasses.dataclass
class LocationFields:
    latitude: float = 0.0
    longitude: float = 0.0
    address: str = ''


@dataclasses.dataclass
class AttractionFields:
    name: str = ''
    short_description: str = ''
    description: str = ''
    category: str = ''
    featured: bool = False
    location: LocationFields = dataclasses.field(default_factory=LocationFields)
    duration: str = ''
    difficulty: str = ''
    accessibility: str = ''
    highlights: str = ''
    best_time: str = ''


@dataclasses.dataclass
class NewsFields:
    title: str = ''
    content: str = ''
    excerpt: str = ''
    category: str = ''
    author: str = ''
    featured: bool = False
    publish_date: str = dataclasses.field(
        default_factory=lambda: datetime.date.today().isoformat()
    )


@dataclasses.dataclass
class GalleryFields:
    title: str = ''
    description: str = ''
    category: str = ''


@dataclasses.dataclass
class CultureFields:
    title: str = ''
    description: str = ''
    category: str = ''
    is_featured: bool = False


@dataclasses.dataclass
class ItineraryFields:
    title: str = ''
    description: str = ''
    duration: str = ''
    difficulty: str = ''
    highlights: str = ''


@dataclasses.dataclass
class ContactFields:
    name: str = ''
    email: str = ''
    subject: str = ''
    message: str = ''


# ---------------------------------------------------------------------------
# Forms
# ---------------------------------------------------------------------------

FieldsT = TypeVar('FieldsT')
RecordT = TypeVar('RecordT', bound=sqlmodel.SQLModel)


class EntityForm(Generic[FieldsT, RecordT]):
    """Create or edit one record of a content type."""

    label: ClassVar[str]
    fields_type: ClassVar[type]
    # Dotted field paths that may not be left blank.
    required: ClassVar[tuple[str, ...]] = ()
    # Select options for `category`; blank means no category.
    categories: ClassVar[tuple[str, ...]] = ()
    # Numeric fields, which count as blank until a value parses.
    number_fields: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        service: services.EntityService,
        item: RecordT | None = None,
        on_success: Callable[[], None] | None = None,
        on_error: Callable[[str], None] | None = None,
    ):
        self.service = service
        self.item = item
        self.on_success = on_success
        self.on_error = on_error
        self.image: models.ImageFile | None = None
        self.submitting = False
        self.state: FieldsT = self.seed(item) if item is not None else self.fields_type()
        self.unparsed: set[str] = set() if item is not None else set(self.number_fields)

    @property
    def editing(self) -> bool:
        return self.item is not None

    def seed(self, item: RecordT) -> FieldsT:
        """Field state for an existing record."""
        names = {f.name for f in dataclasses.fields(self.fields_type)}
        return self.fields_type(**{name: getattr(item, name) for name in names})

    def to_input(self) -> sqlmodel.SQLModel:
        """The service input built from the current field state."""
        raise NotImplementedError

    def set_image(self, image: models.ImageFile | None) -> None:
        self.image = image

    def field_value(self, path: str) -> Any:
        value: Any = self.state
        for name in path.split('.'):
            value = getattr(value, name)
        return value

    def parse_number(self, path: str, value: Any) -> float:
        """Parse a numeric field, falling back to 0.0 and recording it as blank."""
        try:
            number = float(value)
        except (TypeError, ValueError):
            self.unparsed.add(path)
            return 0.0
        self.unparsed.discard(path)
        return number

    def set_text(self, name: str, value: Any) -> None:
        if not isinstance(getattr(self.state, name, None), str):
            raise AttributeError(f'{type(self).__name__} has no text field {name!r}')
        setattr(self.state, name, '' if value is None else str(value))

    def load(self, values: Mapping[str, Any]) -> None:
        """Apply raw submitted values through the field setters."""
        for name, value in values.items():
            setter = getattr(self, f'set_{name.replace(".", "_")}', None)
            if setter is not None and name not in _NOT_FIELDS:
                setter(value)
            elif isinstance(getattr(self.state, name, None), str):
                self.set_text(name, value)
            else:
                logger.debug('Ignoring unknown %s field %r', self.label, name)

    def validate(self) -> None:
        """Reject blank required fields, unknown categories and a missing image."""
        for path in self.required:
            value = self.field_value(path)
            if path in self.unparsed or (isinstance(value, str) and not value.strip()):
                name = path.replace('.', ' ').replace('_', ' ')
                raise InvalidInputError(f'Please fill in {name}')
        category = getattr(self.state, 'category', '')
        if self.categories and category and category not in self.categories:
            raise InvalidInputError(f'Unknown category {category!r}')
        if not self.editing and self.service.bucket is not None and self.image is None:
            raise InvalidInputError('Please select an image')

    def submit(self) -> Notification:
        """Save the record and report the outcome."""
        self.submitting = True
        try:
            self.validate()
            if self.item is not None:
                self.service.update(self.item.id, self.to_input(), self.image)
            else:
                self.service.create(self.to_input(), self.image)
        except ContentError as exc:
            logger.error('Error saving %s: %s', self.label.lower(), exc)
            message = str(exc) or f'Failed to save {self.label.lower()}'
            if self.on_error is not None:
                self.on_error(message)
            return Notification.error(message)
        finally:
            self.submitting = False

        if self.on_success is not None:
            self.on_success()
        verb = 'updated' if self.editing else 'created'
        return Notification.success(f'{self.label} {verb} successfully')


class AttractionForm(EntityForm[AttractionFields, models.Attraction]):
    label = 'Attraction'
    fields_type = AttractionFields
    required = (
        'name',
        'short_description',
        'description',
        'location.latitude',
        'location.longitude',
        'location.address',
        'duration',
        'difficulty',
        'accessibility',
        'best_time',
    )
    categories = ATTRACTION_CATEGORIES
    number_fields = ('location.latitude', 'location.longitude')

    def seed(self, item: models.Attraction) -> AttractionFields:
        return AttractionFields(
            name=item.name,
            short_description=item.short_description,
            description=item.description,
            category=item.category,
            featured=item.featured,
            location=LocationFields(
                latitude=item.location.latitude,
                longitude=item.location.longitude,
                address=item.location.address,
            ),
            duration=item.duration,
            difficulty=item.difficulty,
            accessibility=item.accessibility,
            highlights=models.join_highlights(item.highlights),
            best_time=item.best_time,
        )

    def set_location_latitude(self, value: Any) -> None:
        self.state.location.latitude = self.parse_number('location.latitude', value)

    def set_location_longitude(self, value: Any) -> None:
        self.state.location.longitude = self.parse_number('location.longitude', value)

    def set_location_address(self, value: Any) -> None:
        self.state.location.address = '' if value is None else str(value)

    def set_latitude(self, value: Any) -> None:
        self.set_location_latitude(value)

    def set_longitude(self, value: Any) -> None:
        self.set_location_longitude(value)

    def set_highlights(self, value: str) -> None:
        self.state.highlights = value

    def set_featured(self, value: Any) -> None:
        self.state.featured = parse_checkbox(value)

    def to_input(self) -> models.AttractionInput:
        fields = dataclasses.asdict(self.state)
        return models.AttractionInput.model_validate(fields)


class NewsForm(EntityForm[NewsFields, models.NewsArticle]):
    label = 'News article'
    fields_type = NewsFields
    required = ('title', 'excerpt', 'content', 'author', 'publish_date')
    categories = NEWS_CATEGORIES

    def set_featured(self, value: Any) -> None:
        self.state.featured = parse_checkbox(value)

    def to_input(self) -> models.NewsArticleInput:
        return models.NewsArticleInput.model_validate(dataclasses.asdict(self.state))


class GalleryForm(EntityForm[GalleryFields, models.GalleryItem]):
    label = 'Gallery item'
    fields_type = GalleryFields
    required = ('title', 'description')
    categories = GALLERY_CATEGORIES

    def to_input(self) -> models.GalleryItemInput:
        return models.GalleryItemInput.model_validate(dataclasses.asdict(self.state))


class CultureForm(EntityForm[CultureFields, models.CulturalItem]):
    label = 'Cultural item'
    fields_type = CultureFields
    required = ('title', 'description')
    categories = CULTURE_CATEGORIES

    def set_is_featured(self, value: Any) -> None:
        self.state.is_featured = parse_checkbox(value)

    def to_input(self) -> models.CulturalItemInput:
        return models.CulturalItemInput.model_validate(dataclasses.asdict(self.state))


class ItineraryForm(EntityForm[ItineraryFields, models.Itinerary]):
    label = 'Itinerary'
    fields_type = ItineraryFields

    def seed(self, item: models.Itinerary) -> ItineraryFields:
        return ItineraryFields(
            title=item.title,
            description=item.description,
            duration=item.duration,
            difficulty=item.difficulty,
            highlights=models.join_highlights(item.highlights),
        )

    def set_highlights(self, value: str) -> None:
        self.state.highlights = value

    def to_input(self) -> models.ItineraryInput:
        return models.ItineraryInput.model_validate(dataclasses.asdict(self.state))


class ContactForm(EntityForm[ContactFields, models.ContactMessage]):
    """The public plan-your-visit inquiry form. Create only."""

    label = 'Message'
    fields_type = ContactFields

    def validate(self) -> None:
        for field in dataclasses.fields(ContactFields):
            if not getattr(self.state, field.name).strip():
                raise InvalidInputError(f'Please fill in your {field.name}')
        if '@' not in self.state.email:
            raise InvalidInputError('Please enter a valid email address')

    def to_input(self) -> models.ContactMessageInput:
        return models.ContactMessageInput(
            name=self.state.name.strip(),
            email=self.state.email.strip(),
            subject=self.state.subject.strip(),
            message=self.state.message.strip(),
        )

    def submit(self) -> Notification:
        notification = super().submit()
        if notification.ok:
            self.state = ContactFields()
            return Notification.success('Message sent successfully')
        return notification
