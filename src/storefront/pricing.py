"""Line and basket arithmetic shared by carts and orders.

Totals are always derived from lines through these functions when an
aggregate mutates; a caller-supplied total is never stored.
"""


def line_total(unit_price: float, quantity: int) -> float:
    return round(unit_price * quantity, 2)


def basket_total(lines) -> float:
    """Sum of ``line_total`` over objects or dicts carrying a line total."""
    return round(sum(_get(line, "line_total") for line in lines), 2)


def item_count(lines) -> int:
    return sum(_get(line, "quantity") for line in lines)


def amounts_match(left: float, right: float) -> bool:
    return abs((left or 0.0) - (right or 0.0)) < 0.005


def to_minor_units(amount: float) -> int:
    """Amount in the currency's smallest unit (paise, cents)."""
    return int(round(amount * 100))


def _get(line, name):
    if isinstance(line, dict):
        return line[name]
    return getattr(line, name)
