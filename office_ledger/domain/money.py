"""Fixed-point money in integer minor units (cents)

All arithmetic stays in cents. Rounding happens only inside ``multiply`` and
``divide`` (and when parsing major-unit input), always ROUND_HALF_UP:
  2499.5 cents -> 2500, -2499.5 cents -> -2500
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from office_ledger.domain.exceptions import InvalidAmountError

MINOR_UNITS = 100

Number = Union[int, float, str, Decimal]


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, bool):
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    try:
        # str() keeps floats at their shortest repr (0.1 -> "0.1", not 0.1000000000000000055...)
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise InvalidAmountError(f"Invalid amount: {value!r}") from e
    if not number.is_finite():
        raise InvalidAmountError(f"Amount must be finite, got {value!r}")
    return number


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


@dataclass(frozen=True, order=True)
class Money:
    """Immutable amount of money in cents"""

    cents: int

    def __post_init__(self):
        if isinstance(self.cents, bool) or not isinstance(self.cents, int):
            raise InvalidAmountError(f"Money must hold integer cents, got {self.cents!r}")

    @classmethod
    def from_minor(cls, cents: int, allow_negative: bool = False) -> "Money":
        if isinstance(cents, bool) or not isinstance(cents, int):
            raise InvalidAmountError(f"Minor units must be an integer, got {cents!r}")
        if cents < 0 and not allow_negative:
            raise InvalidAmountError(f"Amount cannot be negative: {cents}")
        return cls(cents)

    @classmethod
    def from_major(cls, value: Number, allow_negative: bool = False) -> "Money":
        """Parse a major-unit amount (e.g. 12.345 reais -> 1235 cents)"""
        cents = _round_half_up(_to_decimal(value) * MINOR_UNITS)
        if cents < 0 and not allow_negative:
            raise InvalidAmountError(f"Amount cannot be negative: {value!r}")
        return cls(cents)

    @classmethod
    def zero(cls) -> "Money":
        return cls(0)

    def add(self, other: "Money") -> "Money":
        return Money(self.cents + other.cents)

    def subtract(self, other: "Money") -> "Money":
        return Money(self.cents - other.cents)

    def multiply(self, factor: Number) -> "Money":
        return Money(_round_half_up(Decimal(self.cents) * _to_decimal(factor)))

    def divide(self, divisor: Number) -> "Money":
        divisor_dec = _to_decimal(divisor)
        if divisor_dec == 0:
            raise InvalidAmountError("Cannot divide money by zero")
        return Money(_round_half_up(Decimal(self.cents) / divisor_dec))

    def is_zero(self) -> bool:
        return self.cents == 0

    def is_negative(self) -> bool:
        return self.cents < 0

    def compare(self, other: "Money") -> int:
        """Return -1, 0 or 1"""
        return (self.cents > other.cents) - (self.cents < other.cents)

    def __add__(self, other: "Money") -> "Money":
        return self.add(other)

    def __sub__(self, other: "Money") -> "Money":
        return self.subtract(other)

    def to_major(self) -> Decimal:
        return Decimal(self.cents) / MINOR_UNITS

    def format_brl(self) -> str:
        """Format as Brazilian currency: R$ 1.234,56"""
        sign = "-" if self.cents < 0 else ""
        whole, frac = divmod(abs(self.cents), MINOR_UNITS)
        grouped = f"{whole:,}".replace(",", ".")
        return f"{sign}R$ {grouped},{frac:02d}"

    def __str__(self) -> str:
        return self.format_brl()


def sum_money(amounts) -> Money:
    """Sum an iterable of Money values"""
    total = Money.zero()
    for amount in amounts:
        total = total + amount
    return total
