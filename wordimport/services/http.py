"""Rate-limit aware JSON fetcher shared by the remote service clients."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from types import TracebackType
from typing import Any

import httpx

from wordimport.config import settings

logger = logging.getLogger(__name__)

Params = Mapping[str, str | int]


class FetchError(Exception):
    """A request to a remote service failed."""


class TransportError(FetchError):
    """Non-success status, connection failure or undecodable body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RetryAfterError(FetchError):
    """A rate-limit response did not say how long to wait."""


class RateLimitExhausted(FetchError):
    """The service kept rate limiting after every allowed attempt."""


class RateLimitedFetcher:
    """
    GET JSON documents, backing off when the service answers 429.

    The wait time comes from the ``Retry-After`` header, which must be a
    non-negative number of seconds. Only rate-limit responses are retried;
    every other failure is raised immediately.
    """

    PAGE_SIZE = 1000

    def __init__(
        self,
        base_url: str = "",
        headers: Mapping[str, str] | None = None,
        *,
        max_attempts: int | None = None,
        timeout: float | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.max_attempts = (
            max_attempts if max_attempts is not None else settings.max_request_attempts
        )
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        self._sleep = sleep
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            headers=dict(headers or {}),
            timeout=timeout or settings.http_timeout,
        )

    async def __aenter__(self) -> "RateLimitedFetcher":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def get(self, path: str, params: Params | None = None) -> Any:
        """
        Request ``path`` and return the decoded JSON body.

        Raises:
            RetryAfterError: 429 without a usable Retry-After header
            RateLimitExhausted: still rate limited after max_attempts
            TransportError: any other failure
        """
        for attempt in range(1, self.max_attempts + 1):
            logger.debug(f"Requesting {path} (attempt {attempt}/{self.max_attempts})")
            try:
                response = await self._client.get(path, params=dict(params or {}))
            except httpx.HTTPError as e:
                raise TransportError(f"Request to {path} failed: {e}") from e

            if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
                delay = _retry_after(response)
                if attempt == self.max_attempts:
                    break
                logger.info(f"Rate limited on {path}, waiting {delay} seconds...")
                await self._sleep(delay)
                continue

            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise TransportError(
                    f"{path} returned HTTP {response.status_code}",
                    status_code=response.status_code,
                ) from e

            try:
                return response.json()
            except ValueError as e:
                raise TransportError(f"{path} returned malformed JSON: {e}") from e

        raise RateLimitExhausted(
            f"Still rate limited on {path} after {self.max_attempts} attempts"
        )

    async def get_all_pages(self, path: str, params: Params | None = None) -> list[Any]:
        """Collect ``results`` from every page until the response has no ``next``."""
        results: list[Any] = []
        page = 1

        while True:
            page_params = {**(params or {}), "page": page, "page_size": self.PAGE_SIZE}
            data = await self.get(path, page_params)
            results.extend(data.get("results") or [])

            if not data.get("next"):
                return results
            page += 1


def _retry_after(response: httpx.Response) -> int:
    """Parse the Retry-After header as whole, non-negative seconds."""
    value = response.headers.get("Retry-After")
    if value is None:
        raise RetryAfterError("Rate limited without a Retry-After header")
    digits = value.strip()
    if not (digits.isascii() and digits.isdigit()):
        raise RetryAfterError(f"Unparsable Retry-After header: {value!r}")
    return int(digits)
