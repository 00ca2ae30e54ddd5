from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """
    Normalize a numeric value to a 2-decimal Decimal.

    - Accepts None, int, str, float, Decimal
    - Floats go through str() so 0.1 stays 0.10 rather than its binary expansion
    """
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def sum_money(values) -> Decimal:
    return to_money(sum((to_money(v) for v in values), Decimal("0")))
