import httpx
import pytest

from app.providers.polymarket import GammaClient, MarketFilter, UpstreamError


def _client(handler):
    return GammaClient(base_url="https://gamma.test", transport=httpx.MockTransport(handler))


def test_filter_omits_absent_fields():
    params = MarketFilter(active=True, limit=10, category="").to_query_params()

    assert params == {"active": "true", "limit": "10"}


@pytest.mark.asyncio
async def test_fetch_markets_sends_only_present_filters():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=[{"id": 1, "question": "Will it rain?", "volume": 1234.5}])

    client = _client(handler)
    markets = await client.fetch_markets(MarketFilter(closed=False, offset=0, limit=5))

    assert seen["path"] == "/markets"
    assert seen["params"] == {"closed": "false", "offset": "0", "limit": "5"}
    assert markets[0].id == "1"
    assert markets[0].volume == "1234.5"


@pytest.mark.asyncio
async def test_fetch_markets_unwraps_results_envelope():
    def handler(request):
        return httpx.Response(200, json={"results": [
            {"id": "a", "conditionId": "0xc", "outcomes": "[\"Yes\", \"No\"]"},
        ]})

    markets = await _client(handler).fetch_markets()

    assert len(markets) == 1
    assert markets[0].condition_id == "0xc"
    assert markets[0].outcomes == ["Yes", "No"]


@pytest.mark.asyncio
async def test_fetch_markets_raises_upstream_error_with_status_text():
    def handler(request):
        return httpx.Response(503)

    with pytest.raises(UpstreamError) as exc_info:
        await _client(handler).fetch_markets()

    assert exc_info.value.status_code == 503
    assert "Service Unavailable" in str(exc_info.value)


@pytest.mark.asyncio
async def test_fetch_markets_wraps_transport_errors():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError):
        await _client(handler).fetch_markets()


@pytest.mark.asyncio
async def test_get_market_returns_none_when_missing():
    def handler(request):
        return httpx.Response(404)

    assert await _client(handler).get_market("nope") is None


@pytest.mark.asyncio
async def test_get_categories_is_best_effort():
    def ok(request):
        return httpx.Response(200, json=[{"name": "Politics"}, {"label": "Sports"}, {}])

    def broken(request):
        return httpx.Response(500)

    assert await _client(ok).get_categories() == ["Politics", "Sports"]
    assert await _client(broken).get_categories() == []


@pytest.mark.asyncio
async def test_get_events_returns_records_and_is_best_effort():
    seen = {}

    def ok(request):
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"results": [{"id": "e1", "title": "Election"}, "junk"]})

    def broken(request):
        return httpx.Response(503)

    events = await _client(ok).get_events(limit=20, offset=40)

    assert events == [{"id": "e1", "title": "Election"}]
    assert seen == {"path": "/events", "params": {"limit": "20", "offset": "40"}}
    assert await _client(broken).get_events() == []
