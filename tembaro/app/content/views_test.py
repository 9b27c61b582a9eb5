"""Unit tests for views.py."""

import unittest
from unittest import mock

from tembaro.app import errors
from tembaro.app.content import services, services_test, views


class TestCategoryMatches(unittest.TestCase):
    def test_all(self) -> None:
        """All matches every category."""
        self.assertTrue(views.category_matches('All', 'anything'))

    def test_ignores_case(self) -> None:
        """Category chips match stored values regardless of case."""
        self.assertTrue(views.category_matches('Natural', 'natural'))
        self.assertFalse(views.category_matches('Natural', 'cultural'))
        self.assertFalse(views.category_matches('Natural', ''))


class ViewTestCase(services_test.ServiceTestCase):
    def seed(self, table: str, day: int, **fields) -> str:
        row = self.backend.insert(table, {**services_test.stamps(day), **fields})
        return row['id']


class TestListView(ViewTestCase):
    """Tests for ListView."""

    def test_loads_once(self) -> None:
        """load() fetches once unless asked to reload."""
        fetch = mock.Mock(return_value=services.Result([]))
        view = views.ListView(fetch, 'Failed to load attractions')
        self.assertTrue(view.loading)
        view.load()
        view.load()
        fetch.assert_called_once()
        self.assertFalse(view.loading)
        view.load(reload=True)
        self.assertEqual(fetch.call_count, 2)

    def test_filters_by_category(self) -> None:
        """Selecting a category filters the loaded items."""
        self.seed('attractions', 1, name='Wenjelu Waterfall', category='natural')
        self.seed('attractions', 2, name='Old Church', category='cultural')
        view = views.attractions_view(self.content)
        view.load()
        self.assertEqual(view.categories, ('All', 'Natural', 'Cultural'))
        self.assertEqual(len(view.items), 2)

        view.select_category('Natural')
        self.assertEqual([a.name for a in view.items], ['Wenjelu Waterfall'])
        view.select_category('All')
        self.assertEqual(len(view.items), 2)

    def test_failure_sets_banner(self) -> None:
        """A failed fetch sets the fixed banner and an empty list."""
        with mock.patch.object(
            self.backend, 'select', side_effect=errors.BackendError('down')
        ):
            with self.assertLogs(services.logger, 'ERROR'):
                view = views.attractions_view(self.content)
                view.load()
        self.assertEqual(view.error, 'Failed to load attractions')
        self.assertEqual(view.items, [])
        self.assertFalse(view.loading)

    def test_empty_is_not_an_error(self) -> None:
        """No rows is not an error."""
        view = views.gallery_view(self.content)
        view.load()
        self.assertIsNone(view.error)
        self.assertEqual(view.items, [])


class TestNewsListView(ViewTestCase):
    def test_lead_and_rest(self) -> None:
        """The first featured article leads and the rest can be filtered."""
        self.seed('news', 1, title='Harvest', category='agriculture')
        self.seed('news', 2, title='Festival', category='events', featured=True)
        self.seed('news', 3, title='Market day', category='events')
        view = views.NewsListView(self.content.news)
        view.load()

        assert view.lead is not None
        self.assertEqual(view.lead.title, 'Festival')
        self.assertEqual([a.title for a in view.items], ['Market day', 'Harvest'])
        view.select_category('Events')
        self.assertEqual([a.title for a in view.items], ['Market day'])


class TestDetailView(ViewTestCase):
    """Tests for DetailView."""

    def test_related_excludes_current(self) -> None:
        """Related items never include the item being shown."""
        ids = [
            self.seed('attractions', day, name=f'Site {day}', featured=True)
            for day in range(1, 6)
        ]
        view = views.attraction_detail(self.content)
        item = view.load(ids[-1])

        assert item is not None
        self.assertEqual(item.name, 'Site 5')
        self.assertEqual([a.name for a in view.related], ['Site 4', 'Site 3', 'Site 2'])

    def test_related_from_latest_news(self) -> None:
        """A lone article has no related news."""
        first = self.seed('news', 1, title='Only article')
        view = views.news_detail(self.content)
        view.load(first)
        self.assertEqual(view.related, [])

    def test_missing(self) -> None:
        """An unknown id resolves to None with no related items."""
        view = views.culture_detail(self.content)
        self.assertIsNone(view.load('missing'))
        self.assertEqual(view.related, [])

    def test_itinerary_has_no_related(self) -> None:
        """Itinerary detail has no related items."""
        row_id = self.seed('itineraries', 1, title='Two days')
        view = views.itinerary_detail(self.content)
        self.assertIsNotNone(view.load(row_id))
        self.assertEqual(view.related, [])


if __name__ == '__main__':
    unittest.main()
