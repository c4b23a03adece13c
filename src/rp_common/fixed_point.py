"""Integer fixed-point arithmetic for the risk-pool ledger.

All amounts are int in the smallest unit of the payment asset; all ratios
are basis points (BPS = 10000 = 100%). No float, no Decimal.

Every division is preceded by an explicit zero check and raises
DivisionByZeroError instead of trapping. Results above MAX_AMOUNT raise
ArithmeticOverflowError — Python ints never wrap, so the bound stands in
for the storage width (BIGINT columns hold amounts well below it).
"""

from src.rp_common.errors import (
    ArithmeticOverflowError,
    DivisionByZeroError,
    InvalidAmountError,
)

BPS = 10_000
SECONDS_PER_YEAR = 365 * 24 * 3600
MAX_AMOUNT = 2**127 - 1


def ensure_bounded(value: int, context: str) -> int:
    """Reject values outside [-MAX_AMOUNT, MAX_AMOUNT]."""
    if value > MAX_AMOUNT or value < -MAX_AMOUNT:
        raise ArithmeticOverflowError(context)
    return value


def ensure_positive(value: int, field: str) -> int:
    if value <= 0:
        raise InvalidAmountError(field, value)
    ensure_bounded(value, field)
    return value


def checked_div(numerator: int, denominator: int, context: str) -> int:
    """Floor division for non-negative operands, zero-checked."""
    if denominator == 0:
        raise DivisionByZeroError(context)
    return ensure_bounded(numerator // denominator, context)


def mul_div(a: int, b: int, denominator: int, context: str) -> int:
    """a * b // denominator, truncating toward zero for non-negative inputs."""
    if denominator == 0:
        raise DivisionByZeroError(context)
    return ensure_bounded(a * b // denominator, context)


def apply_bps(amount: int, bps: int) -> int:
    """amount * bps / 10000, truncated."""
    return mul_div(amount, bps, BPS, "apply_bps")


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def format_amount(amount: int, decimals: int = 6) -> str:
    """Render smallest units for display: 1234500000 -> '1,234.500000'."""
    scale = 10**decimals
    if amount < 0:
        return f"-{format_amount(-amount, decimals)}"
    if decimals == 0:
        return f"{amount:,}"
    return f"{amount // scale:,}.{amount % scale:0{decimals}d}"


def pro_rata(amount: int, weights: dict[str, int]) -> dict[str, int]:
    """Split `amount` by integer weights, exactly.

    Each share is truncated first; the leftover units (fewer than the number
    of participants) go one each to the largest fractional remainders,
    earliest entry first on ties. No share ever exceeds amount * w / total
    rounded up, so a share never exceeds its own weight when amount <= total.
    """
    if amount == 0:
        return {key: 0 for key in weights}
    total = sum(weights.values())
    if total == 0:
        raise DivisionByZeroError("pro_rata")
    shares: dict[str, int] = {}
    remainders: list[tuple[int, int, str]] = []
    for position, (key, weight) in enumerate(weights.items()):
        share, remainder = divmod(amount * weight, total)
        shares[key] = share
        remainders.append((-remainder, position, key))
    residual = amount - sum(shares.values())
    for _, _, key in sorted(remainders)[:residual]:
        shares[key] += 1
    return shares
