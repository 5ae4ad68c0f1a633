import io
import logging
import unittest
from unittest import mock

import requests
from urllib3.connectionpool import HTTPConnectionPool
from urllib3.response import HTTPResponse
from urllib3.util.retry import Retry

from capwise.config import AdvisorSettings, resolve_log_level
from capwise.integration.advisor_client import (
    API_ERROR,
    NETWORK_ERROR,
    NOT_CONFIGURED,
    RATE_LIMIT,
    AdvisorClient,
)


def _response(status: int, payload=None, text: str = "") -> mock.Mock:
    response = mock.Mock()
    response.status_code = status
    response.ok = 200 <= status < 400
    response.text = text
    response.json.return_value = payload if payload is not None else {}
    return response


def _success(text: str) -> mock.Mock:
    return _response(200, {"candidates": [{"content": {"parts": [{"text": text}]}}]})


class AdvisorClientTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = mock.Mock()
        self.sleep = mock.Mock()
        self.settings = AdvisorSettings(api_key="test-key", model="test-model")

    def _client(self, settings: AdvisorSettings = None) -> AdvisorClient:
        return AdvisorClient(settings or self.settings, session=self.session, sleep=self.sleep)

    def test_successful_generation(self) -> None:
        self.session.post.return_value = _success("Worth doing.")
        result = self._client().generate("prompt")
        self.assertTrue(result.ok)
        self.assertEqual(result.text, "Worth doing.")
        _, kwargs = self.session.post.call_args
        self.assertEqual(kwargs["params"], {"key": "test-key"})
        self.assertEqual(kwargs["json"]["contents"][0]["parts"][0]["text"], "prompt")
        self.assertIn("test-model:generateContent", self.session.post.call_args[0][0])

    def test_rate_limit_is_retried_after_wait(self) -> None:
        self.session.post.side_effect = [_response(429), _success("ok")]
        result = self._client().generate("prompt")
        self.assertTrue(result.ok)
        self.sleep.assert_called_once_with(5.0)

    def test_rate_limit_exhausts_retries(self) -> None:
        self.session.post.return_value = _response(429)
        with self.assertLogs("capwise.integration.advisor_client", level="WARNING"):
            result = self._client().generate("prompt")
        self.assertFalse(result.ok)
        self.assertEqual(result.error, RATE_LIMIT)
        self.assertEqual(self.session.post.call_count, 3)
        self.assertEqual(self.sleep.call_count, 2)

    def test_network_errors_are_reported(self) -> None:
        self.session.post.side_effect = requests.ConnectionError("boom")
        with self.assertLogs("capwise.integration.advisor_client", level="WARNING"):
            result = self._client().generate("prompt")
        self.assertEqual(result.error, NETWORK_ERROR)
        self.assertIn("boom", result.details)
        self.sleep.assert_has_calls([mock.call(2.0), mock.call(2.0)])

    def test_api_error_is_not_retried(self) -> None:
        self.session.post.return_value = _response(500, text="server error")
        result = self._client().generate("prompt")
        self.assertEqual(result.error, API_ERROR)
        self.assertEqual(self.session.post.call_count, 1)

    def test_missing_text_uses_placeholder(self) -> None:
        self.session.post.return_value = _response(200, {"candidates": []})
        result = self._client().generate("prompt")
        self.assertTrue(result.ok)
        self.assertEqual(result.text, "No response received")

    def test_unconfigured_client_skips_network(self) -> None:
        result = self._client(AdvisorSettings(api_key="")).generate("prompt")
        self.assertEqual(result.error, NOT_CONFIGURED)
        self.session.post.assert_not_called()


class AdvisorTransportTests(unittest.TestCase):
    """Drive the default session through its mounted adapter without a network."""

    def setUp(self) -> None:
        self.sleep = mock.Mock()
        self.client = AdvisorClient(AdvisorSettings(api_key="test-key"), sleep=self.sleep)
        self.client._session.trust_env = False

    def test_adapter_retries_only_server_errors(self) -> None:
        retries = self.client._session.get_adapter("https://example.com").max_retries
        self.assertFalse(retries.raise_on_status)
        self.assertEqual(retries.connect, 0)
        self.assertIn(503, retries.status_forcelist)

    def test_persistent_server_error_is_an_api_error(self) -> None:
        def unavailable(*args, **kwargs) -> HTTPResponse:
            return HTTPResponse(
                body=io.BytesIO(b"service unavailable"),
                status=503,
                headers={},
                preload_content=False,
            )

        with mock.patch.object(
            HTTPConnectionPool, "_make_request", side_effect=unavailable
        ) as make_request, mock.patch.object(Retry, "sleep"):
            result = self.client.generate("prompt")

        self.assertFalse(result.ok)
        self.assertEqual(result.error, API_ERROR)
        self.assertIn("503", result.details)
        self.assertEqual(make_request.call_count, 3)
        self.sleep.assert_not_called()


class AdvisorSettingsTests(unittest.TestCase):
    def test_from_env(self) -> None:
        env = {
            "GEMINI_API_KEY": "abc",
            "CAPWISE_ADVISOR_MODEL": "custom",
            "CAPWISE_ADVISOR_TIMEOUT": "7.5",
        }
        with mock.patch.dict("os.environ", env, clear=True):
            settings = AdvisorSettings.from_env()
        self.assertTrue(settings.configured)
        self.assertEqual(settings.model, "custom")
        self.assertEqual(settings.timeout, 7.5)

    def test_log_level_resolution(self) -> None:
        with mock.patch.dict("os.environ", {}, clear=True):
            self.assertEqual(resolve_log_level(), logging.WARNING)
            self.assertEqual(resolve_log_level("debug"), logging.DEBUG)
        with mock.patch.dict("os.environ", {"CAPWISE_LOG_LEVEL": "info"}, clear=True):
            self.assertEqual(resolve_log_level(), logging.INFO)
            self.assertEqual(resolve_log_level("ERROR"), logging.ERROR)

    def test_invalid_timeout_falls_back_to_default(self) -> None:
        with mock.patch.dict("os.environ", {"CAPWISE_ADVISOR_TIMEOUT": "soon"}, clear=True):
            settings = AdvisorSettings.from_env()
        self.assertFalse(settings.configured)
        self.assertEqual(settings.timeout, 20.0)


if __name__ == "__main__":
    unittest.main()
