"""
Values -- integer minor-unit money and its display-boundary conversions.

Responsibility:
    Every amount in the kernel (expense amounts, budget allocations, spent,
    remaining, rollover) is an ``int`` number of cents.  This module holds the
    ``Money`` value object wrapping that integer and the helpers that convert
    to and from the decimal display form used by forms, exports and UIs.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Imported by
    validation, analytics and the services' input boundary.

Invariants enforced:
    - Arithmetic on amounts is integer arithmetic.  Conversion to Decimal
      happens only in ``from_cents``/``format_cents``.
    - ``float`` is rejected at every entry point; binary floating point can
      not represent most cent values exactly.

Failure modes:
    - TypeError when a float (or other non-numeric type) is supplied.
    - ValueError from ``parse_currency`` on malformed text.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENTS_PER_UNIT = 100
_CENT = Decimal("0.01")


def to_cents(amount: Decimal | str | int) -> int:
    """
    Convert a display amount (dollars) to integer cents, rounding half-up.

    Raises:
        TypeError: If ``amount`` is a float or an unsupported type.
        ValueError: If ``amount`` is a string that is not a number.
    """
    if isinstance(amount, bool) or isinstance(amount, float):
        raise TypeError(f"amount must be Decimal, str or int, not {type(amount).__name__}")
    if isinstance(amount, int):
        return amount * CENTS_PER_UNIT
    if isinstance(amount, str):
        try:
            amount = Decimal(amount.strip())
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {amount!r}") from e
    if not isinstance(amount, Decimal):
        raise TypeError(f"amount must be Decimal, str or int, not {type(amount).__name__}")
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {amount}")
    return int((amount * CENTS_PER_UNIT).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents: int) -> Decimal:
    """Convert integer cents to a two-place Decimal for display."""
    if isinstance(cents, bool) or not isinstance(cents, int):
        raise TypeError(f"cents must be int, not {type(cents).__name__}")
    return (Decimal(cents) / CENTS_PER_UNIT).quantize(_CENT)


def format_cents(
    cents: int,
    *,
    symbol: str = "$",
    show_symbol: bool = True,
    show_cents: bool = True,
) -> str:
    """Format cents as a currency string, e.g. ``-$12.50``."""
    value = from_cents(cents)
    if show_cents:
        text = f"{abs(value):.2f}"
    else:
        text = str(abs(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    sign = "-" if cents < 0 else ""
    return f"{sign}{symbol if show_symbol else ''}{text}"


def format_compact(cents: int, *, symbol: str = "$") -> str:
    """Format large amounts with K/M suffixes (``$1.5K``, ``$2.3M``)."""
    value = from_cents(cents)
    if value >= 1_000_000:
        scaled = (value / 1_000_000).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
        return f"{symbol}{scaled}M"
    if value >= 1_000:
        scaled = (value / 1_000).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
        return f"{symbol}{scaled}K"
    return format_cents(cents, symbol=symbol)


def parse_currency(text: str) -> int:
    """
    Parse user-entered currency text (``"$1,234.56"``) to cents.

    Raises:
        ValueError: If the text does not contain a number.
    """
    cleaned = text.replace("$", "").replace(",", "").strip()
    if not cleaned:
        raise ValueError("Invalid currency value")
    try:
        return to_cents(Decimal(cleaned))
    except InvalidOperation as e:
        raise ValueError("Invalid currency value") from e


@dataclass(frozen=True, slots=True, order=True)
class Money:
    """
    Amount in integer cents.

    Guarantees:
        - Immutable and hashable.
        - ``cents`` is always an ``int`` (never float, never Decimal).
        - ``+``/``-`` and comparisons are exact integer operations.
    """

    cents: int

    def __post_init__(self) -> None:
        if isinstance(self.cents, bool) or not isinstance(self.cents, int):
            raise TypeError(f"Money cents must be int, not {type(self.cents).__name__}")

    @classmethod
    def of(cls, amount: Decimal | str | int) -> Money:
        """Build from a display amount in currency units."""
        return cls(to_cents(amount))

    @classmethod
    def zero(cls) -> Money:
        return cls(0)

    @property
    def is_zero(self) -> bool:
        return self.cents == 0

    @property
    def is_positive(self) -> bool:
        return self.cents > 0

    @property
    def is_negative(self) -> bool:
        return self.cents < 0

    def to_decimal(self) -> Decimal:
        return from_cents(self.cents)

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.cents + other.cents)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.cents - other.cents)

    def __neg__(self) -> Money:
        return Money(-self.cents)

    def __str__(self) -> str:
        return format_cents(self.cents)

    def __repr__(self) -> str:
        return f"Money({self.cents})"
