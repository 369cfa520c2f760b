"""
Thin async client for the TMDB movie catalog.

Used by the orchestrator to fetch seed details and their "similar movies"
pools before the recommendation pipeline runs. The pipeline itself never
performs I/O.
"""
import asyncio
import logging
import random

import httpx
from tqdm import tqdm

from .config import (
    TMDB_BASE_URL,
    HTTP_TIMEOUT,
    DEFAULT_MAX_CONCURRENT,
    MAX_HTTP_RETRIES,
    RETRY_INITIAL_DELAY,
    RETRY_BACKOFF_FACTOR,
    MAX_429_RETRY_SECONDS,
    DEFAULT_RETRY_AFTER,
)

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """The catalog could not be reached or returned unusable data."""


def _retry_after_seconds(resp: httpx.Response) -> float:
    try:
        return max(0.0, float(resp.headers.get("Retry-After", DEFAULT_RETRY_AFTER)))
    except ValueError:
        return float(DEFAULT_RETRY_AFTER)


class AsyncTMDBClient:
    """Async TMDB client with bounded concurrency and coordinated rate limiting."""

    def __init__(
        self,
        api_key: str,
        base_url: str = TMDB_BASE_URL,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
        retry_delay: float = RETRY_INITIAL_DELAY,
        client: httpx.AsyncClient | None = None,
    ):
        if not api_key:
            raise ValueError("A TMDB API key is required")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.retry_delay = retry_delay
        self.semaphore = asyncio.Semaphore(max_concurrent)
        self.client = client
        self._owns_client = client is None
        # When one request hits 429, all requests pause
        self._rate_limit_event = asyncio.Event()
        self._rate_limit_event.set()

    async def __aenter__(self):
        if self.client is None:
            self.client = httpx.AsyncClient(
                headers={"Accept": "application/json", "User-Agent": "tmdb-rec/0.1"},
                follow_redirects=True,
                timeout=HTTP_TIMEOUT,
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.client and self._owns_client:
            await self.client.aclose()
            self.client = None
        return False

    async def _get(self, path: str, params: dict | None = None) -> dict | None:
        """
        GET a catalog path and decode its JSON body.

        Returns None on 404. Timeouts and transport errors are retried with
        exponential backoff; 429s wait for Retry-After, bounded by
        MAX_429_RETRY_SECONDS in total. Every retry counts toward
        MAX_HTTP_RETRIES.

        Raises:
            CatalogError: Any other HTTP error, exhausted retries or a body
                that is not a JSON object
        """
        if not self.client:
            raise RuntimeError("AsyncTMDBClient must be used as an async context manager")

        url = f"{self.base_url}{path}"
        query = {"api_key": self.api_key, **(params or {})}
        delay = self.retry_delay
        total_429_wait = 0.0
        attempt = 0

        async with self.semaphore:
            while attempt < MAX_HTTP_RETRIES:
                await self._rate_limit_event.wait()
                try:
                    resp = await self.client.get(url, params=query)

                    if resp.status_code == 404:
                        return None

                    if resp.status_code == 429:
                        retry_after = _retry_after_seconds(resp)
                        if total_429_wait + retry_after > MAX_429_RETRY_SECONDS:
                            raise CatalogError(
                                f"Rate limit wait exceeded for {path} "
                                f"(waited {total_429_wait:.0f}s, would need {retry_after:.0f}s more)"
                            )
                        logger.warning(f"Rate limited on {path}, pausing all requests for {retry_after:.0f}s")
                        self._rate_limit_event.clear()
                        try:
                            await asyncio.sleep(retry_after + random.uniform(0, delay))
                        finally:
                            self._rate_limit_event.set()
                        total_429_wait += retry_after
                        attempt += 1
                        continue

                    resp.raise_for_status()
                    payload = resp.json()
                    if not isinstance(payload, dict):
                        raise CatalogError(f"Unexpected payload type from {path}: {type(payload).__name__}")
                    return payload

                except (httpx.TimeoutException, httpx.TransportError) as exc:
                    attempt += 1
                    if attempt >= MAX_HTTP_RETRIES:
                        logger.error(f"{path} failed after {MAX_HTTP_RETRIES} attempts: {exc}")
                        raise CatalogError(f"Catalog unreachable for {path}: {exc}") from exc
                    logger.warning(
                        f"{type(exc).__name__} on {path}, retrying in {delay:.1f}s "
                        f"(attempt {attempt}/{MAX_HTTP_RETRIES})"
                    )
                    await asyncio.sleep(delay)
                    delay *= RETRY_BACKOFF_FACTOR

                except httpx.HTTPStatusError as exc:
                    logger.error(f"HTTP {exc.response.status_code} on {path}")
                    raise CatalogError(f"HTTP {exc.response.status_code} from catalog for {path}") from exc

                except httpx.HTTPError as exc:
                    logger.error(f"Request error on {path}: {type(exc).__name__}: {exc}")
                    raise CatalogError(f"Bad response from catalog for {path}: {exc}") from exc

                except ValueError as exc:
                    raise CatalogError(f"Malformed JSON from {path}: {exc}") from exc

        logger.error(f"Max retries exceeded for {path}")
        raise CatalogError(f"Max retries exceeded for {path}")

    async def get_movie(self, movie_id: int) -> dict | None:
        """Movie details with credits and the first page of similar movies."""
        return await self._get(f"/movie/{int(movie_id)}", {"append_to_response": "credits,similar"})

    async def get_similar(self, movie_id: int) -> list[dict]:
        payload = await self._get(f"/movie/{int(movie_id)}/similar")
        if payload is None:
            return []
        return list(payload.get("results") or [])

    async def _get_with_similar(self, movie_id: int) -> tuple[dict | None, list[dict]]:
        details = await self.get_movie(movie_id)
        if details is None:
            return None, []

        similar = details.get("similar")
        if isinstance(similar, dict):
            return details, list(similar.get("results") or [])
        # Fall back to the dedicated endpoint if append_to_response was ignored
        return details, await self.get_similar(movie_id)

    async def get_movies_with_similar(
        self,
        movie_ids: list[int],
        progress: bool = False,
    ) -> list[tuple[dict | None, list[dict]]]:
        """
        Fetch details and similar-movie pools for several movies concurrently.

        Results keep the order of movie_ids; a missing movie yields (None, []).
        """
        with tqdm(total=len(movie_ids), desc="Fetching movies", unit="movie", disable=not progress) as pbar:
            async def fetch(movie_id: int):
                try:
                    return await self._get_with_similar(movie_id)
                finally:
                    pbar.update(1)

            # Let every fetch settle before surfacing a failure so none outlive the client
            results = await asyncio.gather(*(fetch(movie_id) for movie_id in movie_ids), return_exceptions=True)

        failures = [result for result in results if isinstance(result, BaseException)]
        if failures:
            logger.error(f"Failed to fetch {len(failures)}/{len(movie_ids)} movies from catalog")
            raise failures[0]

        found = sum(1 for details, _ in results if details is not None)
        logger.info(f"Fetched {found}/{len(movie_ids)} movies from catalog")
        return list(results)
