"""Local (POI) search: location lookup, batched POI fetches and web fallback."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from fastmcp import Context

from ..shared.types import MergedPoiView, PoiDescription, PoiRecord, SearchQuery
from ..shared.utils import chunk_ids, log_to_client, zip_by_position
from .brave_search import BraveSearchClient
from .formatting import RECORD_SEPARATOR, format_poi_results

logger = logging.getLogger(__name__)

# (query, count, offset) -> rendered web search text
WebSearchFallback = Callable[[str, int, int], Awaitable[str]]

CHUNK_ALL = "chunk_all"
TRUNCATE = "truncate"


def location_ids(data: Dict[str, Any]) -> List[str]:
    """Ordered location ids from a ``result_filter=locations`` web search."""
    locations = (data.get("locations") or {}).get("results") or []
    return [str(loc["id"]) for loc in locations if isinstance(loc, dict) and loc.get("id")]


def merge_pois(
    ids: Sequence[str],
    poi_data: Dict[str, Any],
    description_data: Dict[str, Any],
) -> List[MergedPoiView]:
    """Correlate POI records and descriptions requested for the same ids.

    POI records are matched to ids by position; descriptions carry their own
    id and are joined by equality. Records keep the request order.
    """
    pairs = zip_by_position(ids, poi_data.get("results") or [])
    records = [PoiRecord.from_api(result, location_id) for location_id, result in pairs]

    descriptions: Dict[str, PoiDescription] = {}
    for item in description_data.get("results") or []:
        description = PoiDescription.from_api(item)
        if description is not None:
            descriptions.setdefault(description.location_id, description)

    return [MergedPoiView(record, descriptions.get(record.location_id)) for record in records]


class LocalSearchAggregator:
    """
    Renders local business results for a free-text query.

    Workflow:
    1. Web search restricted to locations.
    2. No locations: delegate to ``web_search_fallback(query, count, 0)``.
    3. Otherwise select ids by policy, and for each chunk of at most 20 ids
       fetch POI data and descriptions concurrently with the same id list.
    4. Join, render, and separate every block with ``---``.

    Id policies:
    - ``chunk_all``: render every returned location, in chunks.
    - ``truncate``: render only the first ``count`` locations.

    The aggregator holds no per-request state and is safe to share. Progress
    messages go to the module logger and, when a request context is passed,
    to the MCP client as log notifications.
    """

    def __init__(
        self,
        client: BraveSearchClient,
        web_search_fallback: WebSearchFallback,
        id_policy: str = CHUNK_ALL,
    ) -> None:
        if id_policy not in (CHUNK_ALL, TRUNCATE):
            raise ValueError(f"Unknown local id policy: {id_policy}")
        self.client = client
        self.web_search_fallback = web_search_fallback
        self.id_policy = id_policy

    def select_ids(self, ids: Sequence[str], count: int) -> List[str]:
        if self.id_policy == TRUNCATE:
            return list(ids[:count])
        return list(ids)

    async def search(self, query: str, count: int = 10, ctx: Optional[Context] = None) -> str:
        request = SearchQuery(text=query, result_count=count)

        results = await self.client.web_search(
            request.text, count=request.result_count, result_filter="locations"
        )
        all_ids = location_ids(results)
        if not all_ids:
            await log_to_client(
                logger,
                "info",
                f'No location results found for "{request.text}", falling back to web search. '
                'Local search requires at least the "Pro" API plan',
                ctx,
            )
            return await self.web_search_fallback(request.text, request.result_count, 0)

        ids = self.select_ids(all_ids, request.result_count)
        logger.debug(f'Using {len(ids)} of {len(all_ids)} location IDs for "{request.text}"')

        blocks: List[str] = []
        for chunk in chunk_ids(ids):
            views = await self._fetch_chunk(chunk)
            if views:
                blocks.append(format_poi_results(views))
        return RECORD_SEPARATOR.join(blocks)

    async def _fetch_chunk(self, ids: List[str]) -> List[MergedPoiView]:
        poi_data, description_data = await asyncio.gather(
            self.client.local_pois(ids),
            self.client.local_descriptions(ids),
        )
        return merge_pois(ids, poi_data, description_data)
