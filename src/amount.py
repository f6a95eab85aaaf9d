import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from errors import AmountOverflowError, ParseError

# Number of decimal digits kept after the point.
SCALE = 4
# Decimal's ROUND_HALF_UP rounds ties away from zero: 1.23455 -> 1.2346, -1.23455 -> -1.2346.
ROUNDING = ROUND_HALF_UP

_FACTOR = 10 ** SCALE
_QUANTUM = Decimal(1).scaleb(-SCALE)
_MIN_UNITS = -(2 ** 63)
_MAX_UNITS = 2 ** 63 - 1
# plain ASCII decimal or exponent notation; no digit separators, no NaN or infinity
_DECIMAL_TEXT = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?", re.ASCII)


def _checked(units: int) -> int:
    if not _MIN_UNITS <= units <= _MAX_UNITS:
        raise AmountOverflowError(f"Amount of {units} units is outside the supported range")
    return units


@dataclass(frozen=True, order=True)
class Amount:
    """
    Fixed-point monetary value counted in 1/10,000th units.
    All arithmetic is exact integer arithmetic.
    """

    units: int = 0

    def __post_init__(self):
        _checked(self.units)

    @classmethod
    def from_decimal_text(cls, text: str) -> "Amount":
        """Parse decimal text such as "1.5" or " -0.00005 ", rounding to 4 digits."""
        stripped = text.strip()
        if not stripped:
            raise ParseError("Amount is empty")
        if not _DECIMAL_TEXT.fullmatch(stripped):
            raise ParseError(f"Amount {text!r} is not a decimal number")
        value = Decimal(stripped)

        try:
            units = int(value.quantize(_QUANTUM, rounding=ROUNDING).scaleb(SCALE))
        except InvalidOperation:
            raise ParseError(f"Amount {text!r} has too many digits") from None
        if not _MIN_UNITS <= units <= _MAX_UNITS:
            raise ParseError(f"Amount {text!r} is outside the supported range")
        return cls(units)

    def add(self, other: "Amount") -> "Amount":
        return Amount(_checked(self.units + other.units))

    def sub(self, other: "Amount") -> "Amount":
        return Amount(_checked(self.units - other.units))

    __add__ = add
    __sub__ = sub

    def is_negative(self) -> bool:
        return self.units < 0

    def is_positive(self) -> bool:
        return self.units > 0

    def to_decimal_text(self) -> str:
        """Render with exactly 4 digits after the point, e.g. "-0.5000"."""
        sign = "-" if self.units < 0 else ""
        whole, fraction = divmod(abs(self.units), _FACTOR)
        return f"{sign}{whole}.{fraction:0{SCALE}d}"

    def __str__(self) -> str:
        return self.to_decimal_text()

    def __repr__(self) -> str:
        return f"Amount({self.to_decimal_text()})"


Amount.ZERO = Amount(0)
