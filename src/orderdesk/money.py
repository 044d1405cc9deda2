"""Money helpers. Amounts are integer paise throughout the domain."""

from decimal import ROUND_HALF_UP, Decimal

from orderdesk.config import GST_RATE

_PAISE = Decimal(100)


def to_paise(amount) -> int:
    """Convert a major-unit amount (rupees) to integer paise."""
    return int((Decimal(str(amount)) * _PAISE).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_major(paise: int) -> Decimal:
    """Convert integer paise to a two-decimal rupee amount."""
    return (Decimal(paise) / _PAISE).quantize(Decimal("0.01"))


def gst_on(subtotal: int) -> int:
    """GST on a paise subtotal, rounded half-up to the nearest paisa."""
    return int((Decimal(subtotal) * GST_RATE).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _group_indian(digits: str) -> str:
    # 12,34,567: last three digits, then groups of two
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_inr(paise: int) -> str:
    """Render paise as Indian rupees, e.g. ``format_inr(12550) == "₹125.50"``."""
    amount = to_major(paise)
    sign = "-" if amount < 0 else ""
    rupees, _, fraction = f"{abs(amount):.2f}".partition(".")
    return f"{sign}₹{_group_indian(rupees)}.{fraction}"
