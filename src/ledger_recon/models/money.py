"""Exact fixed-point currency value stored as integer cents."""

from dataclasses import dataclass
import re

from ..utils.exceptions import MalformedAmountError

# Optional sign, ASCII integer digits, optional fraction (possibly empty, e.g. "5.")
AMOUNT_PATTERN = re.compile(r"^([+-]?)([0-9]+)(?:\.([0-9]*))?$")

MINOR_UNITS = 100


@dataclass(frozen=True, order=True)
class Money:
    """
    Signed count of minor currency units (cents).

    All arithmetic is integer arithmetic. Parsing truncates any precision
    beyond two fractional digits instead of rounding it.
    """

    cents: int = 0

    @classmethod
    def zero(cls) -> "Money":
        return cls(0)

    @classmethod
    def parse(cls, text: str) -> "Money":
        """
        Parse a decimal string such as "-100.25" into Money(-10025).

        Args:
            text: Decimal string with optional leading sign and fraction

        Returns:
            Money value

        Raises:
            MalformedAmountError: If the text is empty or not a plain decimal
        """
        if text is None:
            raise MalformedAmountError("empty amount")

        value = str(text).strip()
        if not value:
            raise MalformedAmountError("empty amount")

        match = AMOUNT_PATTERN.match(value)
        if not match:
            raise MalformedAmountError(f"invalid amount: {value!r}")

        sign, whole, fraction = match.groups()
        # Truncate while loading, then pad to two digits
        fraction = (fraction or "")[:2].ljust(2, "0")

        cents = int(whole) * MINOR_UNITS + int(fraction)
        return cls(-cents if sign == "-" else cents)

    @property
    def is_negative(self) -> bool:
        return self.cents < 0

    @property
    def sign(self) -> int:
        """Bucket sign: -1 for negative values, +1 otherwise (zero included)."""
        return -1 if self.cents < 0 else 1

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.cents + other.cents)

    def __sub__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.cents - other.cents)

    def __neg__(self) -> "Money":
        return Money(-self.cents)

    def __abs__(self) -> "Money":
        return Money(abs(self.cents))

    def __str__(self) -> str:
        sign = "-" if self.cents < 0 else ""
        whole, fraction = divmod(abs(self.cents), MINOR_UNITS)
        return f"{sign}{whole}.{fraction:02d}"
