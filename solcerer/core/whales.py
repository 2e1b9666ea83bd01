"""
Whale Move Detection

A transfer of the tracked mint is a whale move when amount x unit price meets
the USD floor. A populated "from" side is a sell from that wallet, otherwise
it is a buy into the "to" wallet.
"""

from typing import List, Optional, Tuple

from solcerer.models import TokenTransfer, WhaleMove

BUY = "buy"
SELL = "sell"


def classify_transfer(transfer: TokenTransfer) -> Tuple[str, Optional[str]]:
    """Return (side, wallet) for a transfer."""
    if transfer.from_account:
        return SELL, transfer.from_account
    return BUY, transfer.to_account


def detect_whale_moves(
    transfers: List[TokenTransfer],
    mint: str,
    unit_price: float,
    threshold_usd: float,
) -> List[WhaleMove]:
    """
    Find transfers of `mint` worth at least threshold_usd.

    Args:
        transfers: Recent transfers (any mint)
        mint: Tracked mint
        unit_price: Current USD price per token
        threshold_usd: Whale floor

    Returns:
        Whale moves in input order
    """
    if unit_price <= 0:
        return []

    moves: List[WhaleMove] = []
    for transfer in transfers:
        if transfer.mint != mint:
            continue

        usd_value = transfer.amount * unit_price
        if usd_value < threshold_usd:
            continue

        side, wallet = classify_transfer(transfer)
        moves.append(WhaleMove(
            transfer=transfer,
            usd_value=usd_value,
            side=side,
            wallet=wallet,
        ))

    return moves
