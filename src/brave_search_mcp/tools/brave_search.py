"""Brave Search API integration for web, news, video, image and local results."""

import asyncio
import aiohttp
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..configuration.settings import DEFAULT_BASE_URL, BraveSearchConfig
from ..shared.errors import BraveAPIError
from ..shared.types import MAX_IDS_PER_REQUEST

logger = logging.getLogger(__name__)

Params = List[Tuple[str, Any]]


def _build_params(**kwargs: Any) -> Params:
    """Drop unset values; aiohttp rejects None and bool query values."""
    params: Params = []
    for key, value in kwargs.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        params.append((key, value))
    return params


class BraveSearchClient:
    """Thin async client for the Brave Search REST API.

    A new ``aiohttp.ClientSession`` is opened for every request, so one client
    can be shared by concurrent tool calls.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        safesearch: str = "strict",
        session_factory: Callable[..., aiohttp.ClientSession] = aiohttp.ClientSession,
    ) -> None:
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.safesearch = safesearch
        self._session_factory = session_factory

    @classmethod
    def from_config(cls, config: BraveSearchConfig, **kwargs: Any) -> "BraveSearchClient":
        return cls(
            config.api_key,
            base_url=config.base_url,
            timeout=config.request_timeout,
            safesearch=config.safesearch,
            **kwargs,
        )

    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "X-Subscription-Token": self._api_key,
        }

    def _session(self) -> aiohttp.ClientSession:
        return self._session_factory(timeout=aiohttp.ClientTimeout(total=self.timeout))

    async def _get_json(self, path: str, params: Params, endpoint: str) -> Dict[str, Any]:
        """GET ``base_url + path`` and decode the JSON body.

        Raises:
            BraveAPIError: On a non-2xx status, a network error, a timeout or
                an undecodable body.
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"Fetching {endpoint} from {url} with {len(params)} params")

        status: Optional[int] = None
        reason = ""
        data: Any = None
        try:
            async with self._session() as session:
                async with session.get(url, params=params, headers=self._headers()) as response:
                    status = response.status
                    reason = response.reason or ""
                    if 200 <= status < 300:
                        data = await response.json(content_type=None)
        except asyncio.TimeoutError as exc:
            logger.error(f"Brave request for {endpoint} timed out")
            raise BraveAPIError(endpoint, None, "Request timed out") from exc
        except aiohttp.ClientError as exc:
            logger.error(f"Brave request for {endpoint} failed: {exc}")
            raise BraveAPIError(endpoint, None, str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            logger.error(f"Brave response for {endpoint} is not valid JSON: {exc}")
            raise BraveAPIError(endpoint, status, "Invalid JSON body") from exc

        if status is None or not 200 <= status < 300:
            logger.error(f"Brave request for {endpoint} failed with status {status}: {reason}")
            raise BraveAPIError(endpoint, status, reason)
        if not isinstance(data, dict):
            raise BraveAPIError(endpoint, status, "Unexpected response shape")
        return data

    async def web_search(
        self,
        query: str,
        count: int = 10,
        offset: int = 0,
        freshness: Optional[str] = None,
        result_filter: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Search the web. ``result_filter='locations'`` restricts to places."""
        params = _build_params(
            q=query,
            count=count,
            offset=offset,
            safesearch=self.safesearch,
            freshness=freshness,
            result_filter=result_filter,
        )
        return await self._get_json("/web/search", params, "web search results")

    async def news_search(
        self, query: str, count: int = 10, freshness: Optional[str] = None
    ) -> Dict[str, Any]:
        params = _build_params(q=query, count=count, safesearch=self.safesearch, freshness=freshness)
        return await self._get_json("/news/search", params, "news search results")

    async def video_search(self, query: str, count: int = 10) -> Dict[str, Any]:
        params = _build_params(q=query, count=count, safesearch=self.safesearch)
        return await self._get_json("/videos/search", params, "video search results")

    async def image_search(self, query: str, count: int = 1) -> Dict[str, Any]:
        # Image search is always strict, independent of the configured level
        params = _build_params(q=query, count=count, safesearch="strict")
        return await self._get_json("/images/search", params, "image search results")

    async def local_pois(self, ids: Sequence[str]) -> Dict[str, Any]:
        """Fetch structured POI data. Results come back in request order without ids."""
        return await self._get_json("/local/pois", self._id_params(ids), "local POI data")

    async def local_descriptions(self, ids: Sequence[str]) -> Dict[str, Any]:
        """Fetch POI descriptions. Each result carries its own id."""
        return await self._get_json(
            "/local/descriptions", self._id_params(ids), "local descriptions data"
        )

    @staticmethod
    def _id_params(ids: Sequence[str]) -> Params:
        if not ids:
            raise ValueError("At least one location id is required")
        if len(ids) > MAX_IDS_PER_REQUEST:
            raise ValueError(
                f"At most {MAX_IDS_PER_REQUEST} location ids per request, got {len(ids)}"
            )
        return [("ids", location_id) for location_id in ids]

    async def fetch_image(self, url: str) -> Tuple[bytes, str]:
        """Download an image result. Returns the body and its mime type."""
        try:
            async with self._session() as session:
                async with session.get(url) as response:
                    if not 200 <= response.status < 300:
                        raise BraveAPIError(f"image {url}", response.status, response.reason or "")
                    data = await response.read()
                    mime_type = response.content_type or "image/png"
        except asyncio.TimeoutError as exc:
            raise BraveAPIError(f"image {url}", None, "Request timed out") from exc
        except aiohttp.ClientError as exc:
            raise BraveAPIError(f"image {url}", None, str(exc) or type(exc).__name__) from exc

        if not mime_type.startswith("image/"):
            mime_type = "image/png"
        return data, mime_type
