import asyncio
import math

import pytest

from brave_search_mcp.shared.errors import BraveAPIError, PositionalMismatchError
from brave_search_mcp.tools.formatting import RECORD_SEPARATOR, format_web_results
from brave_search_mcp.tools.local_search import (
    CHUNK_ALL,
    TRUNCATE,
    LocalSearchAggregator,
    location_ids,
    merge_pois,
)
from brave_search_mcp.tools.search_tools import BraveSearchTools

from .conftest import FakeBraveClient, make_poi


class RecordingFallback:
    def __init__(self, text: str = "fallback web results"):
        self.text = text
        self.calls = []

    async def __call__(self, query, count, offset):
        self.calls.append((query, count, offset))
        return self.text


def ids(n: int):
    return [f"loc-{i:03d}" for i in range(n)]


@pytest.mark.asyncio
@pytest.mark.parametrize("count", [1, 5, 10, 20])
async def test_no_locations_falls_back_to_web_search(count):
    client = FakeBraveClient(location_ids=[])
    fallback = RecordingFallback()
    aggregator = LocalSearchAggregator(client, fallback)

    text = await aggregator.search("coffee", count)

    assert text == "fallback web results"
    assert fallback.calls == [("coffee", count, 0)]
    assert client.calls_to("local_pois") == []
    assert client.calls_to("local_descriptions") == []


@pytest.mark.asyncio
async def test_location_search_uses_locations_filter():
    client = FakeBraveClient(location_ids=ids(3))
    aggregator = LocalSearchAggregator(client, RecordingFallback())

    await aggregator.search("pizza", 7)

    assert client.calls_to("web_search") == [{
        "query": "pizza",
        "count": 7,
        "offset": 0,
        "freshness": None,
        "result_filter": "locations",
    }]


@pytest.mark.asyncio
@pytest.mark.parametrize("n", [1, 7, 20])
async def test_up_to_twenty_ids_make_one_call_pair(n):
    client = FakeBraveClient(location_ids=ids(n))
    aggregator = LocalSearchAggregator(client, RecordingFallback())

    await aggregator.search("tacos", 20)

    poi_calls = client.calls_to("local_pois")
    description_calls = client.calls_to("local_descriptions")
    assert len(poi_calls) == 1
    assert len(description_calls) == 1
    assert poi_calls[0]["ids"] == ids(n)
    assert description_calls[0]["ids"] == poi_calls[0]["ids"]


@pytest.mark.asyncio
@pytest.mark.parametrize("n", [21, 40, 45])
async def test_chunk_all_splits_ids_and_preserves_order(n):
    all_ids = ids(n)
    client = FakeBraveClient(location_ids=all_ids)
    aggregator = LocalSearchAggregator(client, RecordingFallback(), id_policy=CHUNK_ALL)

    text = await aggregator.search("bars", 10)

    poi_calls = [c["ids"] for c in client.calls_to("local_pois")]
    description_calls = [c["ids"] for c in client.calls_to("local_descriptions")]
    assert len(poi_calls) == math.ceil(n / 20)
    assert poi_calls == description_calls
    assert all(len(chunk) <= 20 for chunk in poi_calls)
    assert [i for chunk in poi_calls for i in chunk] == all_ids

    blocks = text.split(RECORD_SEPARATOR)
    assert len(blocks) == n
    assert [b.splitlines()[0] for b in blocks] == [f"Name: Place {i}" for i in all_ids]


@pytest.mark.asyncio
async def test_truncate_keeps_first_count_ids():
    all_ids = ids(45)
    client = FakeBraveClient(location_ids=all_ids)
    aggregator = LocalSearchAggregator(client, RecordingFallback(), id_policy=TRUNCATE)

    text = await aggregator.search("bars", 5)

    assert [c["ids"] for c in client.calls_to("local_pois")] == [all_ids[:5]]
    assert [c["ids"] for c in client.calls_to("local_descriptions")] == [all_ids[:5]]
    assert len(text.split(RECORD_SEPARATOR)) == 5


def test_unknown_policy_is_rejected():
    with pytest.raises(ValueError):
        LocalSearchAggregator(FakeBraveClient(), RecordingFallback(), id_policy="everything")


@pytest.mark.asyncio
async def test_descriptions_are_joined_by_id_not_position():
    all_ids = ids(3)
    client = FakeBraveClient(
        location_ids=all_ids,
        descriptions={"loc-000": "Wood-fired oven", "loc-002": "Rooftop seating"},
    )
    aggregator = LocalSearchAggregator(client, RecordingFallback())

    blocks = (await aggregator.search("pizza", 3)).split(RECORD_SEPARATOR)

    assert blocks[0].endswith("Description: Wood-fired oven")
    assert blocks[1].endswith("Description: No description found")
    assert blocks[2].endswith("Description: Rooftop seating")


@pytest.mark.asyncio
async def test_record_without_rating_renders_placeholder():
    poi = make_poi("Corner Deli")
    del poi["rating"]
    client = FakeBraveClient(location_ids=["deli"], pois={"deli": poi})
    aggregator = LocalSearchAggregator(client, RecordingFallback())

    text = await aggregator.search("deli", 1)

    assert "Ratings: N/A (0) reviews" in text


@pytest.mark.asyncio
async def test_short_poi_response_fails_loudly():
    client = FakeBraveClient(location_ids=ids(4), drop_poi_results=1)
    aggregator = LocalSearchAggregator(client, RecordingFallback())

    with pytest.raises(PositionalMismatchError) as exc_info:
        await aggregator.search("pizza", 4)

    assert exc_info.value.expected == 4
    assert exc_info.value.received == 3


@pytest.mark.asyncio
@pytest.mark.parametrize("endpoint", ["local_pois", "local_descriptions"])
async def test_batched_endpoint_failure_aborts_aggregation(endpoint):
    client = FakeBraveClient(location_ids=ids(3), fail_on=endpoint)
    aggregator = LocalSearchAggregator(client, RecordingFallback())

    with pytest.raises(BraveAPIError) as exc_info:
        await aggregator.search("pizza", 3)

    assert exc_info.value.status == 500


@pytest.mark.asyncio
async def test_invalid_count_is_rejected_before_any_call():
    client = FakeBraveClient(location_ids=ids(3))
    aggregator = LocalSearchAggregator(client, RecordingFallback())

    with pytest.raises(ValueError):
        await aggregator.search("pizza", 21)

    assert client.calls == []


@pytest.mark.asyncio
async def test_pizza_near_central_park_end_to_end():
    five = ["cp-1", "cp-2", "cp-3", "cp-4", "cp-5"]
    client = FakeBraveClient(location_ids=five)
    tools = BraveSearchTools(client)

    text = await tools.local_search("pizza near Central Park", 5)

    assert client.calls_to("local_pois") == [{"ids": five}]
    assert client.calls_to("local_descriptions") == [{"ids": five}]
    blocks = text.split(RECORD_SEPARATOR)
    assert len(blocks) == 5
    assert [b.splitlines()[0] for b in blocks] == [f"Name: Place {i}" for i in five]


@pytest.mark.asyncio
async def test_gibberish_query_returns_fallback_web_text(web_results):
    client = FakeBraveClient(location_ids=[], web_results=web_results)
    tools = BraveSearchTools(client)

    text = await tools.local_search("asdkfjasdkf", 10)

    assert text == format_web_results("asdkfjasdkf", {"web": {"results": web_results}})
    assert text == await tools.web_search("asdkfjasdkf", 10, 0)
    assert client.calls_to("web_search")[1] == {
        "query": "asdkfjasdkf",
        "count": 10,
        "offset": 0,
        "freshness": None,
        "result_filter": None,
    }
    assert client.calls_to("local_pois") == []


def test_location_ids_skips_entries_without_id():
    data = {"locations": {"results": [{"id": "a"}, {"title": "no id"}, {"id": "b"}]}}
    assert location_ids(data) == ["a", "b"]
    assert location_ids({}) == []


def test_merge_pois_ignores_unrequested_descriptions():
    views = merge_pois(
        ["a"],
        {"results": [make_poi("Alpha")]},
        {"results": [{"id": "zzz", "description": "stray"}, {"id": "a", "description": "match"}]},
    )
    assert len(views) == 1
    assert views[0].record.location_id == "a"
    assert views[0].description.description == "match"


class PerQueryClient(FakeBraveClient):
    """Serves a separate location list per query and yields on every call."""

    def __init__(self, ids_by_query):
        super().__init__(location_ids=[i for ids in ids_by_query.values() for i in ids])
        self.ids_by_query = ids_by_query

    async def web_search(self, query, count=10, offset=0, freshness=None, result_filter=None):
        await asyncio.sleep(0)
        if result_filter == "locations":
            return {"locations": {"results": [{"id": i} for i in self.ids_by_query[query]]}}
        return await super().web_search(query, count, offset, freshness, result_filter)

    async def local_pois(self, ids):
        await asyncio.sleep(0)
        return await super().local_pois(ids)

    async def local_descriptions(self, ids):
        await asyncio.sleep(0)
        return await super().local_descriptions(ids)


@pytest.mark.asyncio
async def test_concurrent_searches_do_not_share_state():
    pizza = [f"pizza-{i:02d}" for i in range(25)]
    sushi = [f"sushi-{i:02d}" for i in range(25)]
    client = PerQueryClient({"pizza": pizza, "sushi": sushi})
    aggregator = LocalSearchAggregator(client, RecordingFallback())

    pizza_text, sushi_text = await asyncio.gather(
        aggregator.search("pizza", 20),
        aggregator.search("sushi", 20),
    )

    pizza_blocks = pizza_text.split(RECORD_SEPARATOR)
    sushi_blocks = sushi_text.split(RECORD_SEPARATOR)
    assert [b.splitlines()[0] for b in pizza_blocks] == [f"Name: Place {i}" for i in pizza]
    assert [b.splitlines()[0] for b in sushi_blocks] == [f"Name: Place {i}" for i in sushi]
    assert "sushi" not in pizza_text
    assert "pizza" not in sushi_text
    for call in client.calls_to("local_pois"):
        assert len({i.split("-")[0] for i in call["ids"]}) == 1
