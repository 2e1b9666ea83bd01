"""Tests for whale move detection."""

from solcerer.core import BUY, SELL, classify_transfer, detect_whale_moves
from solcerer.models import TokenTransfer


MINT = "MintAAAA1111"


def create_transfer(signature="sig1", amount=1_000.0, mint=MINT, from_account=None, to_account="WalletTo99"):
    return TokenTransfer(
        signature=signature,
        mint=mint,
        amount=amount,
        from_account=from_account,
        to_account=to_account,
    )


class TestClassifyTransfer:
    def test_from_side_is_sell(self):
        transfer = create_transfer(from_account="Seller1111", to_account="Pool2222")
        assert classify_transfer(transfer) == (SELL, "Seller1111")

    def test_empty_from_side_is_buy(self):
        transfer = create_transfer(from_account="", to_account="Buyer3333")
        assert classify_transfer(transfer) == (BUY, "Buyer3333")


class TestDetectWhaleMoves:
    def test_threshold_is_inclusive(self):
        transfers = [
            create_transfer("at", amount=10_000),
            create_transfer("below", amount=9_999),
        ]

        moves = detect_whale_moves(transfers, MINT, unit_price=1.0, threshold_usd=10_000)

        assert [m.signature for m in moves] == ["at"]
        assert moves[0].usd_value == 10_000

    def test_other_mints_ignored(self):
        transfers = [create_transfer("other", amount=1_000_000, mint="OtherMint")]
        assert detect_whale_moves(transfers, MINT, 1.0, 10_000) == []

    def test_unit_price_scales_value(self):
        moves = detect_whale_moves([create_transfer(amount=50_000)], MINT, 0.25, 10_000)

        assert len(moves) == 1
        assert moves[0].usd_value == 12_500
        assert moves[0].side == BUY
        assert moves[0].wallet == "WalletTo99"

    def test_no_price_no_moves(self):
        assert detect_whale_moves([create_transfer(amount=10**9)], MINT, 0.0, 10_000) == []

    def test_observation_keyed_by_signature(self):
        move = detect_whale_moves([create_transfer("sigX", amount=20_000)], MINT, 1.0, 10_000)[0]
        observation = move.to_observation()

        assert observation.dedup_key == "sigX"
        assert observation.entity_key == MINT
        assert observation.payload["side"] == BUY
