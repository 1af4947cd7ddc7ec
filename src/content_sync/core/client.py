"""Remote source client: fetches the raw content document.

Two independent transports are tried in sequence, each bounded by the
configured timeout and each with its own cache-defeating query parameter:

1. ``httpx.AsyncClient`` (native async).
2. ``requests.Session`` run in a worker thread via ``run_sync()``.

A body that lacks the ``[config]`` marker or looks like an HTML error page
counts as a failed attempt.
"""

import asyncio
import logging
import secrets
import time

import httpx
import requests

from ..constants import CONFIG_MARKER
from ..errors import InvalidPayload, TransportFailure
from .async_utils import run_sync

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 20.0


def cache_buster() -> str:
    """Return a value unique per request so intermediaries never serve a stale copy."""
    return f"{int(time.time() * 1000)}_{secrets.token_hex(3)}"


def validate_payload(text: str) -> str:
    """Return *text* unchanged, or raise ``InvalidPayload``."""
    if CONFIG_MARKER not in text:
        raise InvalidPayload(f"response missing {CONFIG_MARKER} section")
    if text.strip().startswith("<"):
        raise InvalidPayload("response starts with '<', probably HTML")
    return text


def is_valid_document(text: str | None) -> bool:
    """Return ``True`` if *text* would pass the fetch-time validity check."""
    if not text:
        return False
    try:
        validate_payload(text)
    except InvalidPayload:
        return False
    return True


class RemoteSource:
    """Fetch the content document from a single fixed URL.

    Args:
        url: Location of the raw document.
        timeout: Seconds allowed for each transport attempt.
        http_client: Optional pre-built ``httpx.AsyncClient`` (tests inject
            one with a mock transport).
        session: Optional pre-built ``requests.Session``.
    """

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._client = http_client
        self._session = session

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout, follow_redirects=True
            )
        return self._client

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    async def close(self) -> None:
        """Close both transports."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
        if self._session is not None:
            self._session.close()
            self._session = None

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    async def fetch(self) -> str:
        """Return the raw document text.

        Raises:
            TransportFailure: Both transports failed.  ``attempts`` holds one
                message per transport.
        """
        attempts: list[str] = []

        for name, attempt in (
            ("httpx", self._fetch_primary),
            ("requests", self._fetch_secondary),
        ):
            try:
                return await attempt()
            except asyncio.TimeoutError:
                reason = f"timeout after {self.timeout:g}s"
            except InvalidPayload as exc:
                reason = exc.reason
            except (httpx.HTTPError, requests.RequestException) as exc:
                reason = str(exc) or type(exc).__name__
            logger.warning("%s transport failed: %s", name, reason)
            attempts.append(f"{name} failed: {reason}")

        raise TransportFailure(attempts)

    async def _fetch_primary(self) -> str:
        client = await self._get_client()
        params = {"v": cache_buster()}
        logger.info("GET %s?v=%s (httpx)", self.url, params["v"])

        response = await asyncio.wait_for(
            client.get(self.url, params=params), timeout=self.timeout
        )
        response.raise_for_status()
        text = response.text
        logger.info("httpx received %d bytes", len(text))
        return validate_payload(text)

    async def _fetch_secondary(self) -> str:
        session = self._get_session()
        params = {"x": cache_buster()}
        logger.info("GET %s?x=%s (requests)", self.url, params["x"])

        # requests only bounds each socket operation; bound the whole call.
        response = await asyncio.wait_for(
            run_sync(
                session.get, self.url, params=params, timeout=self.timeout
            ),
            timeout=self.timeout,
        )
        response.raise_for_status()
        text = response.text
        logger.info("requests received %d bytes", len(text))
        return validate_payload(text)
