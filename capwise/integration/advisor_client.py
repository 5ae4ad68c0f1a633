"""HTTP client for the Gemini text-generation advisor."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import AdvisorSettings

LOGGER = logging.getLogger(__name__)

RATE_LIMIT = "RATE_LIMIT"
API_ERROR = "API_ERROR"
NETWORK_ERROR = "NETWORK_ERROR"
NOT_CONFIGURED = "NOT_CONFIGURED"
EMPTY_RESPONSE_TEXT = "No response received"


@dataclass(frozen=True)
class AdvisorResponse:
    """Outcome of a single advisor request; ``error`` is set when ``ok`` is False."""

    ok: bool
    text: str = ""
    error: Optional[str] = None
    details: Optional[str] = None


class AdvisorClient:
    """Post prompts to the ``generateContent`` endpoint and classify failures."""

    _BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

    def __init__(
        self,
        settings: Optional[AdvisorSettings] = None,
        *,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings or AdvisorSettings.from_env()
        self._sleep = sleep
        if session is None:
            session = requests.Session()
            # Transport errors are retried by generate(); the adapter only repeats 5xx.
            retries = Retry(
                total=2,
                connect=0,
                read=0,
                backoff_factor=0.5,
                status_forcelist=(500, 502, 503, 504),
                allowed_methods=("POST",),
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retries)
            session.mount("https://", adapter)
        self._session = session
        self._request_timeout: Tuple[float, float] = (3.0, float(self.settings.timeout))

    @property
    def url(self) -> str:
        return self._BASE_URL.format(model=self.settings.model)

    @staticmethod
    def _extract_text(payload: Dict[str, Any]) -> str:
        try:
            text = payload["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return EMPTY_RESPONSE_TEXT
        return text or EMPTY_RESPONSE_TEXT

    def _post_once(self, prompt: str) -> AdvisorResponse:
        response = self._session.post(
            self.url,
            params={"key": self.settings.api_key},
            json={"contents": [{"parts": [{"text": prompt}]}]},
            timeout=self._request_timeout,
        )
        if response.status_code == 429:
            return AdvisorResponse(ok=False, error=RATE_LIMIT, details=response.text)
        if not response.ok:
            return AdvisorResponse(
                ok=False,
                error=API_ERROR,
                details=f"HTTP {response.status_code}: {response.text}",
            )
        try:
            payload = response.json()
        except ValueError as exc:
            return AdvisorResponse(ok=False, error=API_ERROR, details=f"Invalid JSON: {exc}")
        return AdvisorResponse(ok=True, text=self._extract_text(payload))

    def generate(self, prompt: str) -> AdvisorResponse:
        """Request commentary, waiting between attempts after 429s and network errors."""
        if not self.settings.configured:
            return AdvisorResponse(ok=False, error=NOT_CONFIGURED, details="GEMINI_API_KEY is not set")

        retries = max(int(self.settings.max_retries), 0)
        last: AdvisorResponse = AdvisorResponse(ok=False, error=API_ERROR, details="no attempt made")
        for attempt in range(retries + 1):
            try:
                last = self._post_once(prompt)
            except requests.RequestException as exc:
                LOGGER.warning("Advisor request failed (attempt %d): %s", attempt + 1, exc)
                last = AdvisorResponse(ok=False, error=NETWORK_ERROR, details=str(exc))
                if attempt < retries:
                    self._sleep(self.settings.network_error_wait)
                    continue
                return last

            if last.error == RATE_LIMIT and attempt < retries:
                LOGGER.warning("Advisor rate limited; retrying in %.0fs.", self.settings.rate_limit_wait)
                self._sleep(self.settings.rate_limit_wait)
                continue
            return last
        return last


__all__ = [
    "AdvisorClient",
    "AdvisorResponse",
    "RATE_LIMIT",
    "API_ERROR",
    "NETWORK_ERROR",
    "NOT_CONFIGURED",
]
