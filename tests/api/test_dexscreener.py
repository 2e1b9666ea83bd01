"""Tests for the DexScreener client."""

from unittest.mock import AsyncMock, patch

from solcerer.api import DexScreenerClient, parse_snapshot


MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"


def create_response(**pair_overrides):
    pair = {
        "priceUsd": "0.00002150",
        "marketCap": 1_450_000_000,
        "fdv": 1_900_000_000,
        "liquidity": {"usd": 5_200_000.5},
        "volume": {"h24": 31_000_000},
        "baseToken": {"address": MINT, "name": "Bonk", "symbol": "BONK"},
        "url": "https://dexscreener.com/solana/pair1",
    }
    pair.update(pair_overrides)
    return {"pairs": [pair, {"priceUsd": "99"}]}


class TestParseSnapshot:
    def test_uses_first_pair(self):
        snapshot = parse_snapshot(MINT, create_response())

        assert snapshot.price == 0.0000215
        assert snapshot.market_cap == 1_450_000_000
        assert snapshot.liquidity == 5_200_000.5
        assert snapshot.volume == 31_000_000
        assert (snapshot.name, snapshot.symbol) == ("Bonk", "BONK")

    def test_market_cap_falls_back_to_fdv(self):
        snapshot = parse_snapshot(MINT, create_response(marketCap=None))
        assert snapshot.market_cap == 1_900_000_000

    def test_missing_fields_default(self):
        snapshot = parse_snapshot(MINT, {"pairs": [{}]})

        assert snapshot.price == 0
        assert snapshot.market_cap == 0
        assert (snapshot.name, snapshot.symbol) == ("Unknown", "???")

    def test_no_pairs(self):
        assert parse_snapshot(MINT, {"pairs": None}) is None
        assert parse_snapshot(MINT, None) is None


class TestDexScreenerClient:
    async def test_get_snapshot(self):
        client = DexScreenerClient()
        with patch.object(client, "_request", AsyncMock(return_value=create_response())) as request:
            snapshot = await client.get_snapshot(MINT)

        request.assert_awaited_once_with(MINT)
        assert snapshot.symbol == "BONK"

    async def test_failed_request(self):
        client = DexScreenerClient()
        with patch.object(client, "_request", AsyncMock(return_value=None)):
            assert await client.get_snapshot(MINT) is None

    async def test_close_without_session(self):
        await DexScreenerClient().close()
