"""Unit tests for errors.py."""

import unittest

from tembaro.app import errors


class TestBackendErrorMessage(unittest.TestCase):
    """The user-facing message prefers message, then details, then hint."""

    def test_message_first(self) -> None:
        """message wins over details and hint."""
        err = errors.BackendError.from_payload(
            {'message': 'permission denied', 'details': 'x', 'hint': 'y'}
        )
        self.assertEqual(str(err), 'permission denied')

    def test_details_when_no_message(self) -> None:
        """details is used when there is no message."""
        err = errors.BackendError.from_payload({'details': 'row too big', 'hint': 'y'})
        self.assertEqual(str(err), 'row too big')

    def test_hint_when_no_message_or_details(self) -> None:
        """hint is the last provider field tried."""
        err = errors.BackendError.from_payload({'hint': 'check the bucket name'})
        self.assertEqual(str(err), 'check the bucket name')

    def test_fallback(self) -> None:
        """An empty payload gets the fixed fallback message."""
        err = errors.BackendError.from_payload({})
        self.assertEqual(str(err), errors.FALLBACK_MESSAGE)

    def test_auth_error_description(self) -> None:
        """Auth failures use error_description."""
        err = errors.BackendError.from_payload(
            {'error': 'invalid_grant', 'error_description': 'Invalid login credentials'},
            status_code=400,
        )
        self.assertEqual(str(err), 'Invalid login credentials')
        self.assertEqual(err.code, 'invalid_grant')
        self.assertEqual(err.status_code, 400)

    def test_non_mapping_payload(self) -> None:
        """A plain-text body becomes the message."""
        err = errors.BackendError.from_payload('Bad Gateway', status_code=502)
        self.assertEqual(str(err), 'Bad Gateway')

    def test_keeps_provider_fields(self) -> None:
        """All provider fields stay available for logging."""
        err = errors.BackendError.from_payload(
            {'message': 'm', 'details': 'd', 'hint': 'h', 'code': '42P01'}
        )
        self.assertEqual(
            (err.message, err.details, err.hint, err.code), ('m', 'd', 'h', '42P01')
        )


class TestHierarchy(unittest.TestCase):
    """Editors catch ContentError for both backend and input failures."""

    def test_backend_error_is_content_error(self) -> None:
        """BackendError is a ContentError."""
        self.assertTrue(issubclass(errors.BackendError, errors.ContentError))

    def test_invalid_input_is_content_error(self) -> None:
        """InvalidInputError is a ContentError."""
        self.assertTrue(issubclass(errors.InvalidInputError, errors.ContentError))

    def test_configuration_error_is_not_content_error(self) -> None:
        """Configuration errors are fatal at startup, not shown in forms."""
        self.assertFalse(issubclass(errors.ConfigurationError, errors.ContentError))


if __name__ == '__main__':
    unittest.main()
