"""
HTTP message sources.

One GET per load:

    RemoteSource:           {base_url}/{locale}{extension}
    RemoteNamespaceSource:  {base_url}/{locale}/{namespace}{extension}

Status mapping:
- 2xx        -> JSON payload, optionally reshaped by ``transform``
               (a failing transform is a SourceError)
- 404        -> LocaleUnavailable / NamespaceUnavailable
- other      -> SourceError (with ``status``)
- transport  -> retried ``retries`` times (exponential backoff), then SourceError

A caller-supplied ``httpx.AsyncClient`` is used as-is and never closed here;
without one, a short-lived client is opened per request.
"""

from collections.abc import Callable, Mapping
from typing import Any

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..core.keypath import MessageTree
from ..errors import LocaleUnavailable, NamespaceUnavailable, SourceError
from .base import MessageSource, NamespaceSource

logger = structlog.get_logger()

DEFAULT_EXTENSION = ".json"
DEFAULT_TIMEOUT = 30.0

Transform = Callable[[Any], MessageTree]


class _RemoteFetcher:
    """Shared GET + retry + status mapping for the HTTP sources."""

    def __init__(
        self,
        base_url: str,
        extension: str = DEFAULT_EXTENSION,
        headers: Mapping[str, str] | None = None,
        transform: Transform | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = 0,
        client: httpx.AsyncClient | None = None,
        request_options: Mapping[str, Any] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.extension = extension
        self._request_options = dict(request_options or {})
        # Headers given through request_options merge with the explicit ones
        self.headers = {
            "Content-Type": "application/json",
            **(self._request_options.pop("headers", None) or {}),
            **(headers or {}),
        }
        self.transform = transform
        self.timeout = timeout
        self.retries = retries
        self._client = client
        self.log = logger.bind(component="remote_source", base_url=self.base_url)

    def _on_retry_sleep(self, retry_state: RetryCallState) -> None:
        """Logs each retry with the attempt number and wait time."""
        next_wait = retry_state.next_action.sleep if retry_state.next_action else 0
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        self.log.warning(
            "remote_source.retry",
            attempt=retry_state.attempt_number,
            wait_seconds=round(next_wait, 1),
            error=str(exc) if exc else None,
            error_type=type(exc).__name__ if exc else None,
        )

    async def _send(self, url: str) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url, headers=self.headers, **self._request_options)
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            return await client.get(url, headers=self.headers, **self._request_options)

    async def _send_with_retry(self, url: str) -> httpx.Response:
        max_attempts = self.retries + 1  # first attempt + N retries
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(httpx.TransportError),
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=10),
            before_sleep=self._on_retry_sleep,
            reraise=True,
        ):
            with attempt:
                return await self._send(url)

    async def fetch(self, url: str, locale: str, not_found: LocaleUnavailable) -> MessageTree:
        try:
            response = await self._send_with_retry(url)
        except httpx.HTTPError as e:
            self.log.error("remote_source.connection_error", url=url, error=str(e))
            raise SourceError(f"Failed to load locale {locale} from {url}: {e}", locale=locale) from e

        if response.status_code == 404:
            raise not_found
        if not response.is_success:
            self.log.warning("remote_source.bad_status", url=url, status=response.status_code)
            raise SourceError(
                f"Failed to load locale {locale}: {response.status_code}",
                locale=locale,
                status=response.status_code,
            )

        try:
            data: Any = response.json()
        except ValueError as e:
            raise SourceError(f"Invalid JSON from {url}: {e}", locale=locale) from e

        if self.transform is not None:
            try:
                data = self.transform(data)
            except Exception as e:
                self.log.warning("remote_source.transform_failed", url=url, error=str(e))
                raise SourceError(f"Transform failed for {url}: {e}", locale=locale) from e
        if not isinstance(data, dict):
            raise SourceError(f"Payload from {url} is not a mapping", locale=locale)

        self.log.debug("remote_source.loaded", url=url, keys=len(data))
        return data


class RemoteSource(MessageSource):
    """Fetches ``{base_url}/{locale}{extension}``.

    Locales become "known" once they have been fetched successfully; only
    those are reported by ``has_locale`` and ``available_locales``.

    Usage:
        source = RemoteSource("https://cdn.example.com/i18n", headers={"Authorization": "Bearer ..."})
        await source.load("tr")  # GET https://cdn.example.com/i18n/tr.json
    """

    def __init__(
        self,
        base_url: str,
        extension: str = DEFAULT_EXTENSION,
        headers: Mapping[str, str] | None = None,
        transform: Transform | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = 0,
        client: httpx.AsyncClient | None = None,
        request_options: Mapping[str, Any] | None = None,
    ) -> None:
        self._fetcher = _RemoteFetcher(
            base_url,
            extension=extension,
            headers=headers,
            transform=transform,
            timeout=timeout,
            retries=retries,
            client=client,
            request_options=request_options,
        )
        self._known_locales: list[str] = []

    @property
    def base_url(self) -> str:
        return self._fetcher.base_url

    def url_for(self, locale: str) -> str:
        return f"{self._fetcher.base_url}/{locale}{self._fetcher.extension}"

    async def load(self, locale: str) -> MessageTree:
        data = await self._fetcher.fetch(self.url_for(locale), locale, LocaleUnavailable(locale))
        if locale not in self._known_locales:
            self._known_locales.append(locale)
        return data

    def has_locale(self, locale: str) -> bool:
        return locale in self._known_locales

    def available_locales(self) -> list[str]:
        return list(self._known_locales)


class RemoteNamespaceSource(NamespaceSource):
    """Fetches ``{base_url}/{locale}/{namespace}{extension}``."""

    def __init__(
        self,
        base_url: str,
        extension: str = DEFAULT_EXTENSION,
        headers: Mapping[str, str] | None = None,
        transform: Transform | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = 0,
        client: httpx.AsyncClient | None = None,
        request_options: Mapping[str, Any] | None = None,
    ) -> None:
        self._fetcher = _RemoteFetcher(
            base_url,
            extension=extension,
            headers=headers,
            transform=transform,
            timeout=timeout,
            retries=retries,
            client=client,
            request_options=request_options,
        )

    def url_for(self, namespace: str, locale: str) -> str:
        return f"{self._fetcher.base_url}/{locale}/{namespace}{self._fetcher.extension}"

    async def load(self, namespace: str, locale: str) -> MessageTree:
        return await self._fetcher.fetch(
            self.url_for(namespace, locale),
            locale,
            NamespaceUnavailable(namespace, locale),
        )
