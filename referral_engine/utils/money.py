"""
Money arithmetic.

Every monetary quantity is a ``Decimal`` handled through an explicit
``MoneyPolicy``: 18 fractional digits, truncating rounding, and a private
decimal context. Nothing here reads or mutates the global decimal context.
Strings are the wire/storage representation.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Context, Decimal, InvalidOperation

from referral_engine.utils.exceptions import InvalidInputError


ZERO = Decimal("0")


@dataclass(frozen=True)
class MoneyPolicy:
    """
    Fixed-precision numeric policy.

    Attributes:
        places: Number of fractional digits kept after every operation
        rounding: Decimal rounding mode applied when truncating
        precision: Significant digits of the private context
    """

    places: int = 18
    rounding: str = ROUND_DOWN
    precision: int = 78
    context: Context = field(init=False, repr=False, compare=False)
    quantum: Decimal = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "context",
            Context(prec=self.precision, rounding=self.rounding),
        )
        object.__setattr__(self, "quantum", Decimal(1).scaleb(-self.places))

    def parse(self, value: str | int | Decimal) -> Decimal:
        """
        Parse a monetary value.

        Args:
            value: Decimal string, integer or Decimal

        Returns:
            Finite Decimal truncated to the policy precision

        Raises:
            InvalidInputError: If value is unparsable, NaN or infinite
        """
        if isinstance(value, bool) or isinstance(value, float):
            raise InvalidInputError(
                f"Unsupported monetary value type: {type(value).__name__}"
            )

        if isinstance(value, str):
            value = value.strip()
            if not value:
                raise InvalidInputError("Monetary value cannot be empty")
            if "_" in value:
                raise InvalidInputError(f"Invalid monetary value: {value!r}")

        try:
            parsed = Decimal(value)
        except (InvalidOperation, TypeError, ValueError) as e:
            raise InvalidInputError(
                f"Invalid monetary value: {value!r}"
            ) from e

        if not parsed.is_finite():
            raise InvalidInputError(f"Invalid monetary value: {value!r}")

        return self.quantize(parsed)

    def quantize(self, value: Decimal) -> Decimal:
        """
        Truncate value to the policy's fractional digits.

        Raises:
            InvalidInputError: If value has more digits than the context holds
        """
        try:
            return value.quantize(
                self.quantum, rounding=self.rounding, context=self.context
            )
        except InvalidOperation as e:
            raise InvalidInputError(
                "Monetary value exceeds supported precision"
            ) from e

    def multiply(self, a: Decimal, b: Decimal) -> Decimal:
        """
        Multiply two values and truncate the product.

        Args:
            a: First factor
            b: Second factor

        Returns:
            Product truncated to the policy precision
        """
        return self.quantize(self.context.multiply(a, b))

    def divide(self, a: Decimal, b: Decimal) -> Decimal:
        """Divide and truncate. Division by zero raises InvalidInputError."""
        if b.is_zero():
            raise InvalidInputError("Division by zero")
        return self.quantize(self.context.divide(a, b))

    def add(self, a: Decimal, b: Decimal) -> Decimal:
        """Add two values."""
        return self.quantize(self.context.add(a, b))

    def sum(self, values: Iterable[Decimal]) -> Decimal:
        """
        Sum values without leaving the policy context.

        Args:
            values: Decimals to add

        Returns:
            Exact sum truncated to the policy precision
        """
        total = ZERO
        for value in values:
            total = self.context.add(total, value)
        return self.quantize(total)

    def to_wire(self, value: Decimal) -> str:
        """
        Render value as a plain decimal string.

        No exponent, no trailing zeros: ``100``, ``27.5``, ``0``.

        Args:
            value: Decimal to render

        Returns:
            Wire/storage string
        """
        value = self.quantize(value)
        if value.is_zero():
            return "0"
        return format(value.normalize(self.context), "f")


# Statically fixed policy used by every monetary operation
MONEY = MoneyPolicy()
