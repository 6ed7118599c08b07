from typing import Any, Dict, List, Optional

import pytest

from brave_search_mcp.shared.errors import BraveAPIError


def make_poi(name: str, **overrides: Any) -> Dict[str, Any]:
    poi = {
        "title": name,
        "postal_address": {"displayAddress": f"1 {name} St, New York, NY"},
        "contact": {"telephone": "+1 212-555-0100", "email": f"hello@{name.lower()}.test"},
        "price_range": "$$",
        "rating": {"ratingValue": 4.5, "reviewCount": 120},
    }
    poi.update(overrides)
    return poi


class FakeBraveClient:
    """Records every call and serves canned Brave responses keyed by location id."""

    def __init__(
        self,
        location_ids: Optional[List[str]] = None,
        web_results: Optional[List[Dict[str, Any]]] = None,
        pois: Optional[Dict[str, Dict[str, Any]]] = None,
        descriptions: Optional[Dict[str, str]] = None,
        fail_on: Optional[str] = None,
        drop_poi_results: int = 0,
    ):
        self.location_ids = location_ids or []
        self.web_results = web_results or []
        self.pois = pois if pois is not None else {i: make_poi(f"Place {i}") for i in self.location_ids}
        self.descriptions = descriptions if descriptions is not None else {
            i: f"Description of {i}" for i in self.location_ids
        }
        self.fail_on = fail_on
        self.drop_poi_results = drop_poi_results
        self.news: Dict[str, Any] = {"results": []}
        self.videos: Dict[str, Any] = {"results": []}
        self.images: Dict[str, Any] = {"results": []}
        self.image_bodies: Dict[str, bytes] = {}
        self.calls: List[tuple] = []

    def calls_to(self, method: str) -> List[Dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == method]

    def _maybe_fail(self, method: str) -> None:
        if self.fail_on == method:
            raise BraveAPIError(f"{method} endpoint", 500, "Internal Server Error")

    async def web_search(self, query, count=10, offset=0, freshness=None, result_filter=None):
        self.calls.append(("web_search", {
            "query": query,
            "count": count,
            "offset": offset,
            "freshness": freshness,
            "result_filter": result_filter,
        }))
        self._maybe_fail("web_search")
        if result_filter == "locations":
            return {"locations": {"results": [{"id": i} for i in self.location_ids]}}
        return {"web": {"results": self.web_results}}

    async def local_pois(self, ids):
        self.calls.append(("local_pois", {"ids": list(ids)}))
        self._maybe_fail("local_pois")
        results = [self.pois[i] for i in ids]
        if self.drop_poi_results:
            results = results[:-self.drop_poi_results]
        return {"results": results}

    async def local_descriptions(self, ids):
        self.calls.append(("local_descriptions", {"ids": list(ids)}))
        self._maybe_fail("local_descriptions")
        # Descriptions are ordered independently of the request
        return {
            "results": [
                {"id": i, "description": self.descriptions[i]}
                for i in reversed(list(ids))
                if i in self.descriptions
            ]
        }

    async def news_search(self, query, count=10, freshness=None):
        self.calls.append(("news_search", {"query": query, "count": count, "freshness": freshness}))
        self._maybe_fail("news_search")
        return self.news

    async def video_search(self, query, count=10):
        self.calls.append(("video_search", {"query": query, "count": count}))
        self._maybe_fail("video_search")
        return self.videos

    async def image_search(self, query, count=1):
        self.calls.append(("image_search", {"query": query, "count": count}))
        self._maybe_fail("image_search")
        return self.images

    async def fetch_image(self, url):
        self.calls.append(("fetch_image", {"url": url}))
        if url not in self.image_bodies:
            raise BraveAPIError(f"image {url}", 404, "Not Found")
        return self.image_bodies[url], "image/jpeg"


@pytest.fixture
def web_results():
    return [
        {"title": "Result One", "url": "https://one.test", "description": "First result"},
        {"title": "Result Two", "url": "https://two.test", "description": "Second result"},
    ]
