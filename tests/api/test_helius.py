"""Tests for the Helius client."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

from solcerer.api import HeliusClient, parse_transfers


MINT = "MintAAAA1111"


def create_transaction(signature="sig1", timestamp=1_768_478_400, legs=None):
    return {
        "signature": signature,
        "timestamp": timestamp,
        "tokenTransfers": legs if legs is not None else [
            {
                "fromUserAccount": "Seller1111",
                "toUserAccount": "Pool2222",
                "mint": MINT,
                "tokenAmount": 125_000.5,
            },
        ],
    }


class TestParseTransfers:
    def test_flattens_legs(self):
        transactions = [
            create_transaction("sig1"),
            create_transaction("sig2", legs=[
                {"fromUserAccount": "", "toUserAccount": "Buyer3333", "mint": MINT, "tokenAmount": "10"},
                {"fromUserAccount": "A", "toUserAccount": "B", "mint": "Other", "tokenAmount": 1},
            ]),
        ]

        transfers = parse_transfers(transactions)

        assert [t.signature for t in transfers] == ["sig1", "sig2", "sig2"]
        assert transfers[0].amount == 125_000.5
        assert transfers[0].from_account == "Seller1111"
        assert transfers[0].timestamp == datetime.fromtimestamp(1_768_478_400, tz=timezone.utc)
        assert transfers[1].from_account is None
        assert transfers[1].amount == 10.0

    def test_bad_input(self):
        assert parse_transfers(None) == []
        assert parse_transfers({"error": "nope"}) == []
        assert parse_transfers([{"tokenTransfers": []}, "junk"]) == []

    def test_bad_amount_is_zero(self):
        legs = [{"mint": MINT, "tokenAmount": "lots"}]
        assert parse_transfers([create_transaction(legs=legs)])[0].amount == 0.0


class TestHeliusClient:
    async def test_no_api_key_skips_request(self):
        client = HeliusClient("")
        with patch.object(client, "_request", AsyncMock()) as request:
            assert await client.get_recent_transfers(MINT) == []
        request.assert_not_awaited()

    async def test_get_recent_transfers(self):
        client = HeliusClient("key")
        response = [create_transaction("sig1")]
        with patch.object(client, "_request", AsyncMock(return_value=response)) as request:
            transfers = await client.get_recent_transfers(MINT, limit=20)

        request.assert_awaited_once_with(f"addresses/{MINT}/transactions", {"limit": 20})
        assert [t.signature for t in transfers] == ["sig1"]
