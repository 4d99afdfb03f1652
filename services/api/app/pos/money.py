"""Money helpers. The engine works in integer cents; these convert at the edges."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_CENT = Decimal("0.01")


def to_cents(value: Decimal | int | float | str | None) -> int:
    """Convert a major-unit amount (e.g. ``12.5``) to cents, rounding half up."""

    if value is None:
        return 0
    amount = value if isinstance(value, Decimal) else Decimal(str(value))
    return int((amount.quantize(_CENT, rounding=ROUND_HALF_UP) * 100).to_integral_value())


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(_CENT)


def to_major(cents: int) -> float:
    """Wire representation of an amount (the backend takes plain JSON numbers)."""

    return float(from_cents(cents))


def parse_amount(text: str | None) -> int:
    """Parse an amount typed by the user (``"$1,250.50"``) into cents.

    Blank or unreadable input parses as zero, so it falls through to the usual
    ``NonPositiveAmountError`` / ``InvalidSplitAmountError`` checks.
    """

    cleaned = (text or "").strip().replace("$", "").replace(",", "").replace(" ", "")
    if not cleaned:
        return 0
    try:
        return to_cents(Decimal(cleaned))
    except (InvalidOperation, ValueError):
        return 0


def format_cents(cents: int, symbol: str = "$") -> str:
    sign = "-" if cents < 0 else ""
    return f"{sign}{symbol}{from_cents(abs(cents)):,.2f}"
