import json

import httpx
import pytest

from src.exceptions import DataApiError
from src.feeds.gamma_api import PolymarketDataClient, is_tradeable_market

GAMMA = "https://gamma-api.polymarket.com"
DATA = "https://data-api.polymarket.com"
CLOB = "https://clob.polymarket.com"
USER = "0x1111111111111111111111111111111111111111"


def make_market(**overrides):
    market = {
        "slug": "will-it-rain",
        "clobTokenIds": '["tok-yes", "tok-no"]',
        "outcomePrices": '["0.42", "0.58"]',
        "acceptingOrders": True,
        "liquidity": "20000",
        "volume": "50000",
        "tags": [{"slug": "science"}],
        "events": [{"ended": False, "live": True}],
    }
    market.update(overrides)
    return market


def test_tradeable_market():
    assert is_tradeable_market(make_market())


@pytest.mark.parametrize(
    "overrides",
    [
        {"acceptingOrders": False},
        {"clobTokenIds": None},
        {"outcomePrices": '["0.99", "0.01"]'},
        {"events": [{"ended": True}]},
        {"liquidity": "500"},
        {"tags": [], "liquidity": "3000"},
    ],
)
def test_untradeable_market(overrides):
    assert not is_tradeable_market(make_market(**overrides))


@pytest.mark.asyncio
async def test_list_high_volume_markets_filters_and_sorts(respx_mock):
    markets = [
        make_market(slug="small", liquidity="2000", volume="1000"),
        make_market(slug="closed", acceptingOrders=False),
        make_market(slug="big", liquidity="90000", volume="10000"),
    ]
    route = respx_mock.get(f"{GAMMA}/markets").mock(return_value=httpx.Response(200, json=markets))

    async with httpx.AsyncClient() as http:
        client = PolymarketDataClient(client=http)
        result = await client.list_high_volume_markets(2)

    assert [m["slug"] for m in result] == ["big", "small"]
    params = route.calls.last.request.url.params
    assert params["limit"] == "10"
    assert params["active"] == "true"
    assert params["closed"] == "false"


@pytest.mark.asyncio
async def test_get_market_by_token_id(respx_mock):
    respx_mock.get(f"{GAMMA}/markets").mock(
        return_value=httpx.Response(200, json=[make_market(slug="other", clobTokenIds='["a"]'), make_market()])
    )
    async with httpx.AsyncClient() as http:
        client = PolymarketDataClient(client=http)
        market = await client.get_market_by_token_id("tok-no")
        assert market["slug"] == "will-it-rain"
        with pytest.raises(DataApiError, match="Market not found"):
            await client.get_market_by_token_id("missing")


@pytest.mark.asyncio
async def test_get_market_by_slug(respx_mock):
    route = respx_mock.get(f"{GAMMA}/markets/slug/will-it-rain").mock(
        return_value=httpx.Response(200, json=make_market())
    )
    async with httpx.AsyncClient() as http:
        client = PolymarketDataClient(client=http)
        market = await client.get_market_by_slug(" will-it-rain ", include_tag=True)

    assert market["slug"] == "will-it-rain"
    assert route.calls.last.request.url.params["include_tag"] == "true"


@pytest.mark.asyncio
async def test_empty_slug_rejected():
    client = PolymarketDataClient(client=httpx.AsyncClient())
    with pytest.raises(ValueError):
        await client.get_event_by_slug("  ")
    await client.close()


@pytest.mark.asyncio
async def test_event_api_error(respx_mock):
    respx_mock.get(f"{GAMMA}/events/slug/gone").mock(return_value=httpx.Response(404))
    async with httpx.AsyncClient() as http:
        client = PolymarketDataClient(client=http)
        with pytest.raises(DataApiError, match="Gamma API error: 404"):
            await client.get_event_by_slug("gone")


@pytest.mark.asyncio
async def test_get_positions_defaults(respx_mock):
    route = respx_mock.get(f"{DATA}/positions").mock(
        return_value=httpx.Response(200, json=[{"asset": "tok-yes", "size": 12.5}])
    )
    async with httpx.AsyncClient() as http:
        client = PolymarketDataClient(client=http)
        positions = await client.get_positions(USER)

    assert positions == [{"asset": "tok-yes", "size": 12.5}]
    params = route.calls.last.request.url.params
    assert params["user"] == USER
    assert params["sizeThreshold"] == "1"
    assert params["redeemable"] == "false"
    assert params["mergeable"] == "false"
    assert params["limit"] == "100"
    assert params["offset"] == "0"
    assert params["sortBy"] == "TOKENS"
    assert params["sortDirection"] == "DESC"
    assert "market" not in params
    assert "eventId" not in params


@pytest.mark.asyncio
async def test_get_positions_market_filter(respx_mock):
    route = respx_mock.get(f"{DATA}/positions").mock(return_value=httpx.Response(200, json=[]))
    async with httpx.AsyncClient() as http:
        client = PolymarketDataClient(client=http)
        await client.get_positions(USER, market=["0xc1", "0xc2"], redeemable=True)

    params = route.calls.last.request.url.params
    assert params["market"] == "0xc1,0xc2"
    assert params["redeemable"] == "true"


@pytest.mark.asyncio
async def test_get_positions_rejects_market_and_event():
    client = PolymarketDataClient(client=httpx.AsyncClient())
    with pytest.raises(ValueError):
        await client.get_positions(USER, market=["0xc1"], event_id=[7])
    with pytest.raises(ValueError):
        await client.get_positions(USER, sort_by="VOLUME")
    await client.close()


@pytest.mark.asyncio
async def test_order_book_summaries_dedupes(respx_mock):
    books = [{"asset_id": "a", "bids": [], "asks": []}, {"asset_id": "b", "bids": [], "asks": []}]
    route = respx_mock.post(f"{CLOB}/books").mock(return_value=httpx.Response(200, json=books))
    async with httpx.AsyncClient() as http:
        client = PolymarketDataClient(client=http)
        result = await client.get_order_book_summaries(["a", "b", "a", " "])

    assert result == books
    assert json.loads(route.calls.last.request.content) == [{"token_id": "a"}, {"token_id": "b"}]


@pytest.mark.asyncio
async def test_order_book_summaries_empty_input(respx_mock):
    client = PolymarketDataClient(client=httpx.AsyncClient())
    assert await client.get_order_book_summaries([]) == []
    assert not respx_mock.calls
    await client.close()
