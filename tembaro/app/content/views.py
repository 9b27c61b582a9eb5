"""Public list and detail views over the entity services."""

from collections.abc import Callable, Sequence
from typing import Generic, TypeVar

import sqlmodel

from . import models, services

ALL = 'All'
ATTRACTION_FILTERS = (ALL, 'Natural', 'Cultural')
GALLERY_FILTERS = (ALL, 'Landscapes', 'Culture', 'Nature')
NEWS_FILTERS = (ALL, 'Events', 'Tourism', 'Community', 'Culture', 'Agriculture')

RELATED_QUERY_SIZE = 4
RELATED_LIMIT = 3

T = TypeVar('T', bound=sqlmodel.SQLModel)


def category_matches(selected: str, category: str) -> bool:
    """'All' matches everything; otherwise compare ignoring case."""
    return selected == ALL or selected.casefold() == (category or '').casefold()


class ListView(Generic[T]):
    """A list page: loaded once, filtered client-side by category."""

    def __init__(
        self,
        fetch: Callable[[], services.Result[list[T]]],
        error_message: str,
        categories: Sequence[str] = (ALL,),
    ):
        self._fetch = fetch
        self.error_message = error_message
        self.categories = tuple(categories)
        self.category = ALL
        self.data: list[T] = []
        self.loading = True
        self.error: str | None = None
        self._loaded = False

    def load(self, reload: bool = False) -> None:
        if self._loaded and not reload:
            return
        self.loading = True
        result = self._fetch()
        if result.ok:
            self.data = list(result.value or [])
            self.error = None
        else:
            self.data = []
            self.error = self.error_message
        self.loading = False
        self._loaded = True

    def select_category(self, category: str) -> None:
        self.category = category or ALL

    def matches(self, item: T) -> bool:
        return category_matches(self.category, getattr(item, 'category', ''))

    @property
    def items(self) -> list[T]:
        return [item for item in self.data if self.matches(item)]


class NewsListView(ListView[models.NewsArticle]):
    """News page: the first featured article leads, the rest are listed."""

    def __init__(self, news: services.NewsService):
        super().__init__(news.fetch_all, 'Failed to load news articles', NEWS_FILTERS)

    @property
    def lead(self) -> models.NewsArticle | None:
        return next((article for article in self.data if article.featured), None)

    def matches(self, item: models.NewsArticle) -> bool:
        return not item.featured and super().matches(item)


class DetailView(Generic[T]):
    """One record plus a few related ones, never including itself."""

    def __init__(
        self,
        get: Callable[[str], T | None],
        related: Callable[[int], list[T]],
    ):
        self._get = get
        self._related = related
        self.item: T | None = None
        self.related: list[T] = []

    def load(self, row_id: str) -> T | None:
        self.item = self._get(row_id)
        if self.item is None:
            self.related = []
            return None
        candidates = self._related(RELATED_QUERY_SIZE)
        self.related = [c for c in candidates if getattr(c, 'id', None) != row_id][
            :RELATED_LIMIT
        ]
        return self.item


def attractions_view(content: services.ContentServices) -> ListView[models.Attraction]:
    return ListView(
        content.attractions.fetch_all, 'Failed to load attractions', ATTRACTION_FILTERS
    )


def gallery_view(content: services.ContentServices) -> ListView[models.GalleryItem]:
    return ListView(
        content.gallery.fetch_all, 'Failed to load gallery images', GALLERY_FILTERS
    )


def culture_view(content: services.ContentServices) -> ListView[models.CulturalItem]:
    return ListView(content.cultural.fetch_all, 'Failed to load cultural items')


def itineraries_view(content: services.ContentServices) -> ListView[models.Itinerary]:
    return ListView(content.itineraries.fetch_all, 'Failed to load itineraries')


def attraction_detail(
    content: services.ContentServices,
) -> DetailView[models.Attraction]:
    return DetailView(content.attractions.get_by_id, content.attractions.list_featured)


def news_detail(content: services.ContentServices) -> DetailView[models.NewsArticle]:
    return DetailView(content.news.get_by_id, content.news.list_latest)


def culture_detail(content: services.ContentServices) -> DetailView[models.CulturalItem]:
    return DetailView(content.cultural.get_by_id, content.cultural.list_featured)


def itinerary_detail(content: services.ContentServices) -> DetailView[models.Itinerary]:
    return DetailView(content.itineraries.get_by_id, lambda _limit: [])
