"""Public JSON API for the visitor-facing pages."""

import dataclasses
import typing

import fastapi

from ..backend.base import Backend
from ..backend.client import get_backend
from . import forms, services, views

public_router = fastapi.APIRouter(prefix='/api')


def get_content(
    backend: Backend = fastapi.Depends(get_backend),
) -> services.ContentServices:
    """Get the content services for this request."""
    return services.ContentServices(backend)


def serialize(
    record: typing.Any, with_paragraphs: bool = False
) -> dict[str, typing.Any]:
    data = record.model_dump(mode='json')
    if with_paragraphs:
        data['paragraphs'] = record.paragraphs
    return data


def serialize_list(view: views.ListView) -> dict[str, typing.Any]:
    """A list page: visible items, filter choices and any error banner."""
    return {
        'items': [serialize(item) for item in view.items],
        'categories': list(view.categories),
        'category': view.category,
        'error': view.error,
    }


def serialize_detail(
    view: views.DetailView, label: str, with_paragraphs: bool = False
) -> dict[str, typing.Any]:
    if view.item is None:
        raise fastapi.HTTPException(status_code=404, detail=f'{label} not found')
    return {
        'item': serialize(view.item, with_paragraphs),
        'related': [serialize(item) for item in view.related],
    }


def notification_response(note: forms.Notification) -> dict[str, str]:
    """Return a notification, or raise it as a 400 if it reports a failure."""
    if not note.ok:
        raise fastapi.HTTPException(status_code=400, detail=note.description)
    return dataclasses.asdict(note)


Content = typing.Annotated[services.ContentServices, fastapi.Depends(get_content)]
Category = typing.Annotated[str, fastapi.Query()]


# Attractions
@public_router.get('/attractions')
def list_attractions(content: Content, category: Category = views.ALL) -> dict:
    """All attractions, optionally filtered by category."""
    view = views.attractions_view(content)
    view.load()
    view.select_category(category)
    return serialize_list(view)


@public_router.get('/attractions/featured')
def featured_attractions(content: Content, limit: int = 3) -> list[dict]:
    return [serialize(a) for a in content.attractions.list_featured(limit)]


@public_router.get('/attractions/{attraction_id}')
def get_attraction(attraction_id: str, content: Content) -> dict:
    view = views.attraction_detail(content)
    view.load(attraction_id)
    return serialize_detail(view, 'Attraction')


# News
@public_router.get('/news')
def list_news(content: Content, category: Category = views.ALL) -> dict:
    """News page: the lead article plus the filtered remainder."""
    view = views.NewsListView(content.news)
    view.load()
    view.select_category(category)
    payload = serialize_list(view)
    payload['lead'] = serialize(view.lead) if view.lead is not None else None
    return payload


@public_router.get('/news/latest')
def latest_news(content: Content, limit: int = 3) -> list[dict]:
    return [serialize(a) for a in content.news.list_latest(limit)]


@public_router.get('/news/{article_id}')
def get_news_article(article_id: str, content: Content) -> dict:
    view = views.news_detail(content)
    view.load(article_id)
    return serialize_detail(view, 'Article', with_paragraphs=True)


# Gallery
@public_router.get('/gallery')
def list_gallery(content: Content, category: Category = views.ALL) -> dict:
    view = views.gallery_view(content)
    view.load()
    view.select_category(category)
    return serialize_list(view)


@public_router.get('/gallery/recent')
def recent_gallery(content: Content, limit: int = 8) -> list[dict]:
    return [serialize(g) for g in content.gallery.list_recent(limit)]


# Culture
@public_router.get('/culture')
def list_culture(content: Content) -> dict:
    view = views.culture_view(content)
    view.load()
    return serialize_list(view)


@public_router.get('/culture/featured')
def featured_culture(content: Content, limit: int = 4) -> list[dict]:
    return [serialize(c) for c in content.cultural.list_featured(limit)]


@public_router.get('/culture/{item_id}')
def get_cultural_item(item_id: str, content: Content) -> dict:
    view = views.culture_detail(content)
    view.load(item_id)
    return serialize_detail(view, 'Cultural item', with_paragraphs=True)


# Itineraries
@public_router.get('/itineraries')
def list_itineraries(content: Content) -> dict:
    view = views.itineraries_view(content)
    view.load()
    return serialize_list(view)


@public_router.get('/itineraries/{itinerary_id}')
def get_itinerary(itinerary_id: str, content: Content) -> dict:
    view = views.itinerary_detail(content)
    view.load(itinerary_id)
    return serialize_detail(view, 'Itinerary')


# Contact
@public_router.post('/contact')
def send_message(
    content: Content,
    name: typing.Annotated[str, fastapi.Form()] = '',
    email: typing.Annotated[str, fastapi.Form()] = '',
    subject: typing.Annotated[str, fastapi.Form()] = '',
    message: typing.Annotated[str, fastapi.Form()] = '',
) -> dict[str, str]:
    """Store a visitor inquiry from the plan-your-visit page."""
    form = forms.ContactForm(content.contact)
    form.load({'name': name, 'email': email, 'subject': subject, 'message': message})
    return notification_response(form.submit())
