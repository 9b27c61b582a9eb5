"""Unit tests for client.py."""

import tempfile
import unittest
from unittest import mock

from tembaro.app import config, errors
from tembaro.app.backend import client, hosted, local


class TestCreateBackend(unittest.TestCase):
    """Tests for create_backend."""

    def test_hosted(self) -> None:
        """Hosted settings build a HostedBackend."""
        backend = client.create_backend(
            config.BackendSettings(url='https://abc.supabase.co', anon_key='k')
        )
        self.assertIsInstance(backend, hosted.HostedBackend)
        backend.close()

    def test_local(self) -> None:
        """Local settings build a LocalBackend."""
        tmpdir = tempfile.mkdtemp()
        backend = client.create_backend(
            config.BackendSettings(
                mode=config.LOCAL,
                data_dir=tmpdir,
                admin_email='admin@tembaro.et',
                admin_password='pw',
            )
        )
        self.assertIsInstance(backend, local.LocalBackend)
        backend.close()

    def test_hosted_without_url_fails(self) -> None:
        """Hosted mode without a URL fails fast."""
        with self.assertRaises(errors.ConfigurationError):
            client.create_backend(config.BackendSettings(anon_key='k'))


class TestBackendProvider(unittest.TestCase):
    """Tests for BackendProvider."""

    def test_lazy_and_cached(self) -> None:
        """The backend is built on first use and reused."""
        loader = mock.Mock(
            return_value=config.BackendSettings(url='https://x.supabase.co', anon_key='k')
        )
        factory = mock.Mock()
        provider = client.BackendProvider(loader=loader, factory=factory)
        loader.assert_not_called()

        first = provider.get()
        second = provider.get()
        self.assertIs(first, second)
        loader.assert_called_once()
        factory.assert_called_once()

    def test_missing_configuration_raises_on_get(self) -> None:
        """Missing configuration surfaces on get()."""
        provider = client.BackendProvider(
            loader=lambda: config.BackendSettings.from_env({})
        )
        with self.assertRaises(errors.ConfigurationError):
            provider.get()

    def test_close_releases_backend(self) -> None:
        """close() releases the backend and the next get() builds a new one."""
        factory = mock.Mock()
        provider = client.BackendProvider(
            loader=lambda: config.BackendSettings(), factory=factory
        )
        backend = provider.get()
        provider.close()
        backend.close.assert_called_once()
        self.assertIsNot(provider.get(), None)
        self.assertEqual(factory.call_count, 2)


if __name__ == '__main__':
    unittest.main()
