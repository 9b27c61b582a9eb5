"""Admin dashboard state: tabs, message handling, deletes and editor forms."""

import dataclasses
import logging
from typing import Any

from ..content import forms, models, services
from ..errors import ContentError, InvalidInputError
from .auth import AuthProvider

logger = logging.getLogger(__name__)

OVERVIEW = 'overview'
MESSAGES = 'messages'


@dataclasses.dataclass(frozen=True)
class Section:
    """A content type as the dashboard presents it."""

    plural: str
    label: str
    service: str
    form: type[forms.EntityForm] | None = None


SECTIONS: dict[str, Section] = {
    'gallery': Section('gallery items', 'Gallery item', 'gallery', forms.GalleryForm),
    'news': Section('news articles', 'News article', 'news', forms.NewsForm),
    'attractions': Section(
        'attractions', 'Attraction', 'attractions', forms.AttractionForm
    ),
    'culture': Section(
        'cultural items', 'Cultural item', 'cultural', forms.CultureForm
    ),
    'itineraries': Section(
        'itineraries', 'Itinerary', 'itineraries', forms.ItineraryForm
    ),
    MESSAGES: Section('messages', 'Message', 'contact'),
}

TABS = (OVERVIEW, *SECTIONS)


@dataclasses.dataclass
class TabState:
    items: list[Any] = dataclasses.field(default_factory=list)
    loading: bool = False
    error: str | None = None
    loaded: bool = False


class AdminDashboard:
    """Everything an editor can do once signed in."""

    def __init__(
        self, content: services.ContentServices, auth: AuthProvider | None = None
    ):
        self.content = content
        self.auth = auth
        self.active_tab = OVERVIEW
        self.tabs = {kind: TabState() for kind in SECTIONS}
        self.pending_delete: tuple[str, str] | None = None

    def _section(self, kind: str) -> Section:
        section = SECTIONS.get(kind)
        if section is None:
            raise InvalidInputError(f'Unknown content type {kind!r}')
        return section

    def service(self, kind: str) -> services.EntityService:
        return getattr(self.content, self._section(kind).service)

    def select_tab(self, tab: str) -> None:
        if tab != OVERVIEW and tab not in SECTIONS:
            raise InvalidInputError(f'Unknown tab {tab!r}')
        self.active_tab = tab
        if tab == OVERVIEW:
            for kind in SECTIONS:
                self.load_tab(kind)
        else:
            self.load_tab(tab, reload=True)

    def load_tab(self, kind: str, reload: bool = False) -> TabState:
        state = self.tabs[kind]
        if state.loaded and not reload:
            return state
        state.loading = True
        result = self.service(kind).fetch_all()
        if result.ok:
            state.items = list(result.value or [])
            state.error = None
        else:
            plural = self._section(kind).plural
            state.error = f'Failed to load {plural}. Please try again.'
        state.loading = False
        state.loaded = True
        return state

    def find(self, kind: str, item_id: str) -> Any | None:
        """A loaded item of the given kind, fetched if it is not in the tab."""
        for item in self.tabs[kind].items:
            if item.id == item_id:
                return item
        return self.service(kind).get_by_id(item_id)

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def view_message(self, message_id: str) -> forms.Notification | None:
        """Open a message, marking it read if it was unread."""
        message = self.find(MESSAGES, message_id)
        if message is None:
            return forms.Notification.error('Message not found')
        if message.read:
            return None
        try:
            self.content.contact.mark_as_read(message_id)
        except ContentError:
            return forms.Notification.error('Failed to mark message as read')
        state = self.tabs[MESSAGES]
        state.items = [
            m.model_copy(update={'read': True}) if m.id == message_id else m
            for m in state.items
        ]
        return None

    # ------------------------------------------------------------------
    # Deletes
    # ------------------------------------------------------------------

    def confirm_delete(self, item_id: str, kind: str) -> None:
        self._section(kind)
        self.pending_delete = (item_id, kind)

    def cancel_delete(self) -> None:
        self.pending_delete = None

    def handle_delete(self) -> forms.Notification | None:
        """Delete the item awaiting confirmation."""
        if self.pending_delete is None:
            return None
        item_id, kind = self.pending_delete
        try:
            self.service(kind).delete(item_id)
        except ContentError as exc:
            logger.error('Error deleting %s %s: %s', kind, item_id, exc)
            return forms.Notification.error('Failed to delete item')
        finally:
            self.pending_delete = None
        state = self.tabs[kind]
        state.items = [item for item in state.items if item.id != item_id]
        return forms.Notification.success(
            f'{self._section(kind).label} deleted successfully'
        )

    # ------------------------------------------------------------------
    # Forms
    # ------------------------------------------------------------------

    def open_form(self, kind: str, item: Any | None = None) -> forms.EntityForm:
        """The editor form for a new or existing item."""
        section = self._section(kind)
        if section.form is None:
            raise InvalidInputError(f'{section.plural.capitalize()} cannot be edited')
        return section.form(
            self.service(kind),
            item,
            on_success=lambda: self.load_tab(kind, reload=True),
        )

    # ------------------------------------------------------------------
    # Overview
    # ------------------------------------------------------------------

    def overview(self) -> dict[str, int]:
        counts = {kind: len(state.items) for kind, state in self.tabs.items()}
        counts['unread_messages'] = len(self.unread())
        return counts

    def unread(self) -> list[models.ContactMessage]:
        return [m for m in self.tabs[MESSAGES].items if not m.read]

    def sign_out(self) -> None:
        if self.auth is not None:
            self.auth.sign_out()
