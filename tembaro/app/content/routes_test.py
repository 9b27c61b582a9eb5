"""Unit tests for routes.py."""

import unittest
from unittest import mock

import fastapi
import fastapi.testclient

from tembaro.app import errors
from tembaro.app.backend import client
from tembaro.app.content import models, routes, services, services_test


class TestSerialize(unittest.TestCase):
    def test_paragraphs(self) -> None:
        """Articles serialize with their paragraphs and ISO timestamps."""
        article = models.NewsArticle.model_validate(
            {'id': 'n1', 'content': 'One\nTwo', **services_test.stamps(1)}
        )
        data = routes.serialize(article, with_paragraphs=True)
        self.assertEqual(data['paragraphs'], ['One', 'Two'])
        self.assertTrue(data['created_at'].startswith('2025-03-01T08:00:00'))


class RoutesTestCase(services_test.ServiceTestCase):
    """Base case: the public router over the test backend."""

    def setUp(self) -> None:
        super().setUp()
        app = fastapi.FastAPI()
        app.include_router(routes.public_router)
        app.dependency_overrides[client.get_backend] = lambda: self.backend
        self.client = fastapi.testclient.TestClient(app)

    def seed(self, table: str, day: int, **fields) -> str:
        return self.backend.insert(table, {**services_test.stamps(day), **fields})['id']


class TestAttractionRoutes(RoutesTestCase):
    def test_list_and_filter(self) -> None:
        """The category query filters the list and the chips are returned."""
        self.seed('attractions', 1, name='Wenjelu Waterfall', category='natural')
        self.seed('attractions', 2, name='Old Church', category='cultural')

        response = self.client.get('/api/attractions', params={'category': 'Natural'})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual([a['name'] for a in body['items']], ['Wenjelu Waterfall'])
        self.assertEqual(body['categories'], ['All', 'Natural', 'Cultural'])
        self.assertIsNone(body['error'])

    def test_list_failure_returns_banner(self) -> None:
        """A failed read still answers 200, with the error banner."""
        with mock.patch.object(
            self.backend, 'select', side_effect=errors.BackendError('down')
        ):
            with self.assertLogs(services.logger, 'ERROR'):
                response = self.client.get('/api/attractions')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['error'], 'Failed to load attractions')

    def test_featured(self) -> None:
        """At most three featured attractions are returned."""
        for day in range(1, 5):
            self.seed('attractions', day, name=f'Site {day}', featured=True)
        response = self.client.get('/api/attractions/featured')
        self.assertEqual(len(response.json()), 3)

    def test_detail(self) -> None:
        """A detail response carries the item and its related attractions."""
        row_id = self.seed('attractions', 1, name='Wenjelu Waterfall', featured=True)
        self.seed('attractions', 2, name='Lake', featured=True)
        body = self.client.get(f'/api/attractions/{row_id}').json()
        self.assertEqual(body['item']['name'], 'Wenjelu Waterfall')
        self.assertEqual([a['name'] for a in body['related']], ['Lake'])

    def test_missing_detail(self) -> None:
        """An unknown id answers 404."""
        response = self.client.get('/api/attractions/missing')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['detail'], 'Attraction not found')


class TestNewsRoutes(RoutesTestCase):
    def test_list_with_lead(self) -> None:
        """The featured article is the lead and is left out of the list."""
        self.seed('news', 1, title='Harvest', category='agriculture')
        self.seed('news', 2, title='Festival', category='events', featured=True)
        body = self.client.get('/api/news').json()
        self.assertEqual(body['lead']['title'], 'Festival')
        self.assertEqual([a['title'] for a in body['items']], ['Harvest'])

    def test_latest(self) -> None:
        """The limit query caps the latest articles."""
        for day in range(1, 6):
            self.seed('news', day, title=f'Article {day}')
        body = self.client.get('/api/news/latest', params={'limit': 2}).json()
        self.assertEqual([a['title'] for a in body], ['Article 5', 'Article 4'])

    def test_detail_has_paragraphs(self) -> None:
        """Article detail splits the content into paragraphs."""
        row_id = self.seed('news', 1, title='Harvest', content='First.\nSecond.')
        body = self.client.get(f'/api/news/{row_id}').json()
        self.assertEqual(body['item']['paragraphs'], ['First.', 'Second.'])


class TestOtherRoutes(RoutesTestCase):
    def test_gallery(self) -> None:
        """The gallery lists images with its filter chips."""
        self.seed('gallery', 1, title='Hills', category='landscape')
        body = self.client.get('/api/gallery').json()
        self.assertEqual(body['categories'], ['All', 'Landscapes', 'Culture', 'Nature'])
        self.assertEqual(len(body['items']), 1)

    def test_culture(self) -> None:
        """Culture has list, featured and detail endpoints."""
        row_id = self.seed('cultural_items', 1, title='Coffee ceremony', is_featured=True)
        self.assertEqual(len(self.client.get('/api/culture').json()['items']), 1)
        self.assertEqual(len(self.client.get('/api/culture/featured').json()), 1)
        body = self.client.get(f'/api/culture/{row_id}').json()
        self.assertEqual(body['item']['title'], 'Coffee ceremony')
        self.assertEqual(body['related'], [])

    def test_itineraries(self) -> None:
        """Itineraries have list and detail endpoints."""
        row_id = self.seed('itineraries', 1, title='Two days', highlights=['Market'])
        self.assertEqual(len(self.client.get('/api/itineraries').json()['items']), 1)
        body = self.client.get(f'/api/itineraries/{row_id}').json()
        self.assertEqual(body['item']['highlights'], ['Market'])
        self.assertEqual(self.client.get('/api/itineraries/missing').status_code, 404)


class TestContactRoute(RoutesTestCase):
    def test_send(self) -> None:
        """A complete inquiry is stored unread."""
        response = self.client.post(
            '/api/contact',
            data={
                'name': 'Abebe',
                'email': 'abebe@example.com',
                'subject': 'Guides',
                'message': 'Do you offer guides?',
            },
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['description'], 'Message sent successfully')
        self.assertEqual(len(self.content.contact.list_unread()), 1)

    def test_missing_field(self) -> None:
        """An incomplete inquiry answers 400 and stores nothing."""
        response = self.client.post('/api/contact', data={'name': 'Abebe'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.content.contact.list_all(), [])


if __name__ == '__main__':
    unittest.main()
