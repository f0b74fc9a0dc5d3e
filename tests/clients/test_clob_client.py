from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from py_clob_client.clob_types import OrderType

from src.chain.contracts import ZERO_ADDRESS
from src.clients.clob import ClobNetworkClient

TOKEN = "tok-yes"


def make_client():
    raw = MagicMock()
    raw.get_price.return_value = {"price": "0.55"}
    raw.create_order.return_value = "signed-order"
    raw.create_market_order.return_value = "signed-market-order"
    raw.post_order.return_value = {"success": True, "orderID": "ord-1"}
    return ClobNetworkClient(raw), raw


@pytest.mark.asyncio
async def test_get_price_runs_sync_client():
    client, raw = make_client()
    assert await client.get_price(TOKEN, "BUY") == {"price": "0.55"}
    raw.get_price.assert_called_once_with(TOKEN, "BUY")


@pytest.mark.asyncio
async def test_create_and_post_limit_order():
    client, raw = make_client()
    order = {
        "token_id": TOKEN,
        "price": 0.55,
        "size": 10,
        "side": "BUY",
        "fee_rate_bps": 0,
        "expiration": 0,
        "taker": ZERO_ADDRESS,
    }
    resp = await client.create_and_post_order(order, {"tick_size": "0.01", "neg_risk": False}, "GTC")

    assert resp == {"success": True, "orderID": "ord-1"}
    args, options = raw.create_order.call_args.args
    assert args.token_id == TOKEN
    assert args.price == 0.55
    assert args.size == 10
    assert options.tick_size == "0.01"
    assert options.neg_risk is False
    raw.post_order.assert_called_once_with("signed-order", orderType=OrderType.GTC)


@pytest.mark.asyncio
async def test_create_and_post_market_order_without_options():
    client, raw = make_client()
    order = {"token_id": TOKEN, "amount": 25, "side": "BUY", "fee_rate_bps": 0}
    await client.create_and_post_market_order(order, {}, "FOK", defer_exec=True)

    args, options = raw.create_market_order.call_args.args
    assert args.amount == 25
    assert options is None
    raw.post_order.assert_called_once_with("signed-market-order", orderType=OrderType.FOK)


@pytest.mark.asyncio
async def test_derive_api_key_converts_credentials():
    client, raw = make_client()
    raw.derive_api_key.return_value = SimpleNamespace(
        api_key="k", api_secret="s", api_passphrase="p"
    )
    creds = await client.derive_api_key()
    assert (creds.key, creds.secret, creds.passphrase) == ("k", "s", "p")
    assert creds.complete


@pytest.mark.asyncio
async def test_create_api_key_without_result_raises():
    client, raw = make_client()
    raw.create_api_key.return_value = None
    with pytest.raises(RuntimeError):
        await client.create_api_key()


@pytest.mark.asyncio
async def test_open_orders_non_list_is_empty():
    client, raw = make_client()
    raw.get_orders.return_value = {"unexpected": True}
    assert await client.get_open_orders() == []


@pytest.mark.asyncio
async def test_cancel_order():
    client, raw = make_client()
    raw.cancel.return_value = {"canceled": ["ord-1"]}
    assert await client.cancel_order("ord-1") == {"canceled": ["ord-1"]}
    raw.cancel.assert_called_once_with("ord-1")
