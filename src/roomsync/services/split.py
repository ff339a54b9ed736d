from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN
from typing import Hashable, Sequence, TypeVar

CENT = Decimal("0.01")

K = TypeVar("K", bound=Hashable)


def to_cents(amount: Decimal) -> int:
    try:
        quantized = amount.quantize(CENT)
    except InvalidOperation as exc:
        raise ValueError(f"invalid money amount: {amount!r}") from exc
    if quantized != amount:
        raise ValueError(f"money amount has more than two decimal places: {amount}")
    return int(quantized * 100)


def from_cents(amount_cents: int) -> Decimal:
    return (Decimal(amount_cents) / 100).quantize(CENT)


def split_amount(amount_cents: int, consumers: Sequence[K]) -> dict[K, int]:
    """Split ``amount_cents`` across ``consumers`` so the shares add up exactly.

    Each share starts from the half-even rounded quotient; the leftover cents
    go one at a time to consumers in the order given.
    """
    if amount_cents < 0:
        raise ValueError("amount_cents must be non-negative")
    if not consumers:
        raise ValueError("consumers must not be empty")

    n = len(consumers)
    decimal_amount = Decimal(amount_cents)
    base_share = (decimal_amount / Decimal(n)).quantize(Decimal("1"), rounding=ROUND_HALF_EVEN)

    shares = [int(base_share) for _ in consumers]
    total = sum(shares)
    remainder = amount_cents - total

    idx = 0
    step = 1 if remainder > 0 else -1
    while remainder != 0:
        shares[idx] += step
        remainder -= step
        idx = (idx + 1) % n

    return {consumer: share for consumer, share in zip(consumers, shares)}


def split_equally(amount: Decimal, participants: Sequence[K]) -> dict[K, Decimal]:
    """Equal split in money units; remainder cents go to participants in sorted order."""
    ordered = sorted(participants)
    cents = split_amount(to_cents(amount), ordered)
    return {participant: from_cents(share) for participant, share in cents.items()}
