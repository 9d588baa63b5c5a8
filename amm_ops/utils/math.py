"""Price, tick and unit helpers for Uniswap V3 operations"""

import math
from decimal import Decimal, ROUND_FLOOR, localcontext

Q96 = 2 ** 96

MIN_TICK = -887272
MAX_TICK = 887272

# Significant digits used by encode_price_sqrt
SQRT_PRECISION = 60


def encode_price_sqrt(reserve1, reserve0):
    """
    Encode a reserve ratio as a Q64.96 square-root price.

    sqrt(reserve1 / reserve0) * 2**96, computed with 60 significant digits
    and rounded down. encode_price_sqrt(1, 1) == 2**96.

    Args:
        reserve1: Amount of token1 (int, Decimal or numeric string)
        reserve0: Amount of token0

    Returns:
        sqrtPriceX96 as an int
    """
    with localcontext() as ctx:
        ctx.prec = SQRT_PRECISION
        r1 = Decimal(str(reserve1))
        r0 = Decimal(str(reserve0))
        if r1 <= 0 or r0 <= 0:
            raise ValueError(f"Reserves must be positive, got {reserve1}/{reserve0}")

        value = (r1 / r0).sqrt() * Q96
        return int(value.to_integral_value(rounding=ROUND_FLOOR))


def sort_tokens(token_a, token_b):
    """
    Order two token addresses the way Uniswap pools do.

    Comparison is on the lower-cased address, so the result does not depend
    on checksum casing or argument order.

    Returns:
        (token0, token1, swapped) where swapped is True if token_b came first
    """
    a, b = token_a.lower(), token_b.lower()
    if a == b:
        raise ValueError(f"Identical token addresses: {token_a}")
    if a < b:
        return token_a, token_b, False
    return token_b, token_a, True


def round_tick_to_spacing(tick, spacing):
    """Round tick down to a multiple of spacing"""
    return math.floor(tick / spacing) * spacing


def tick_range_around(tick, spacing, width=10):
    """
    Tick range of width spacings either side of the spacing-aligned tick.

    Clamped to the usable tick bounds for the spacing.
    """
    base = round_tick_to_spacing(tick, spacing)
    lowest = -(-MIN_TICK // spacing) * spacing
    highest = (MAX_TICK // spacing) * spacing
    return max(base - width * spacing, lowest), min(base + width * spacing, highest)


def sqrt_price_x96_to_price(sqrt_price_x96, decimals0=18, decimals1=18):
    """Price of token0 in token1, adjusted for decimals"""
    with localcontext() as ctx:
        ctx.prec = SQRT_PRECISION
        ratio = (Decimal(sqrt_price_x96) / Q96) ** 2
        return ratio * Decimal(10) ** decimals0 / Decimal(10) ** decimals1


def parse_units(amount, decimals=18):
    """
    Convert a whole-token amount to base units.

    Raises:
        ValueError: If the amount has more fractional digits than decimals allows
    """
    amount = Decimal(str(amount))
    with localcontext() as ctx:
        ctx.prec = len(amount.as_tuple().digits) + abs(decimals) + 2
        value = amount.scaleb(decimals)
    if value != value.to_integral_value():
        raise ValueError(f"{amount} has more than {decimals} decimal places")
    return int(value)


def format_units(amount, decimals=18):
    """Convert base units to a whole-token Decimal"""
    amount = Decimal(amount)
    with localcontext() as ctx:
        ctx.prec = len(amount.as_tuple().digits) + abs(decimals) + 2
        value = amount.scaleb(-decimals)
        if value == value.to_integral_value():
            return value.quantize(Decimal(1))
        return value.normalize()


def bytes32_string(text):
    """UTF-8 string right-padded to a bytes32 value"""
    raw = text.encode("utf-8")
    if len(raw) > 31:
        raise ValueError(f"String too long for bytes32: {text!r}")
    return raw.ljust(32, b"\x00")
