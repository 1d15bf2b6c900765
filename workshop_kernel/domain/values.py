"""
Currency and Money, the value types behind every euro the workshop bills.

Amounts are ``Decimal`` end to end.  A float handed to ``to_decimal`` or
``Money`` is a TypeError: a price typed as ``8.25`` would already carry
binary error before the ledger ever saw it.

Money is exact.  Sums and products keep every digit; only ``round()`` and
``display()`` bring an amount to the currency's precision, and both round
half up the way Spanish invoices do.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from functools import total_ordering

from workshop_kernel.domain.currency import CurrencyInfo, CurrencyRegistry

_SPANISH_SEPARATORS = str.maketrans(",.", ".,")


def to_decimal(value: Decimal | str | int) -> Decimal:
    """
    Convert a wire/ORM value to Decimal without passing through float.

    Strings are stripped first; "12,50" is not a number here.

    Raises:
        TypeError: If value is a float (or bool) or some other type.
        ValueError: If value is not a numeric string.
    """
    match value:
        case Decimal():
            return value
        case bool() | float():
            raise TypeError(
                f"Monetary values must be Decimal, str or int, got {type(value).__name__}"
            )
        case int():
            return Decimal(value)
        case str():
            try:
                return Decimal(value.strip())
            except InvalidOperation as e:
                raise ValueError(f"Not a decimal number: {value!r}") from e
    raise TypeError(f"Cannot convert {type(value).__name__} to Decimal")


@dataclass(frozen=True, slots=True)
class Currency:
    """An ISO 4217 code known to CurrencyRegistry, upper-cased."""

    code: str

    def __post_init__(self) -> None:
        code = (self.code or "").strip().upper()
        if not CurrencyRegistry.is_valid(code):
            raise ValueError(f"Invalid ISO 4217 currency code: {self.code}")
        object.__setattr__(self, "code", code)

    @classmethod
    def coerce(cls, currency: str | Currency) -> Currency:
        return currency if isinstance(currency, Currency) else cls(currency)

    @property
    def info(self) -> CurrencyInfo:
        return CurrencyRegistry.get(self.code)

    @property
    def decimal_places(self) -> int:
        return self.info.decimal_places

    @property
    def symbol(self) -> str:
        return self.info.symbol

    def __str__(self) -> str:
        return self.code


@total_ordering
@dataclass(frozen=True, slots=True)
class Money:
    """
    A Decimal amount in one currency.

    Adding, subtracting or ordering amounts in different currencies raises
    ValueError.  Equality is plain dataclass equality, so 1 EUR != 1 USD
    without raising.
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        amount = to_decimal(self.amount)
        if not amount.is_finite():
            raise ValueError(f"Invalid amount: {amount}")
        if not isinstance(self.currency, (Currency, str)):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "currency", Currency.coerce(self.currency))

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | Currency) -> Money:
        return cls(to_decimal(amount), Currency.coerce(currency))

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        return cls(Decimal(0), Currency.coerce(currency))

    @property
    def is_zero(self) -> bool:
        return not self.amount

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """Same currency, amount quantized to its minor unit."""
        return Money(self.currency.info.quantize(self.amount, rounding), self.currency)

    def display(self) -> str:
        """
        Rounded amount in Spanish notation with the symbol after it.

        "." groups thousands and "," marks decimals: 1.234,56 €.
        """
        info = self.currency.info
        rounded = info.quantize(self.amount)
        digits = f"{abs(rounded):,.{info.decimal_places}f}".translate(_SPANISH_SEPARATORS)
        return f"{'-' if rounded < 0 else ''}{digits} {info.symbol}"

    def _same_currency(self, other: Money, action: str) -> Decimal:
        if other.currency != self.currency:
            raise ValueError(
                f"Cannot {action} Money with different currencies: "
                f"{self.currency} and {other.currency}"
            )
        return other.amount

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.amount + self._same_currency(other, "add"), self.currency)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.amount - self._same_currency(other, "subtract"), self.currency)

    def __mul__(self, factor: Decimal | int | str) -> Money:
        if isinstance(factor, float) or not isinstance(factor, (Decimal, int, str)):
            return NotImplemented
        return Money(self.amount * to_decimal(factor), self.currency)

    __rmul__ = __mul__

    def __neg__(self) -> Money:
        return Money(-self.amount, self.currency)

    def __abs__(self) -> Money:
        return Money(abs(self.amount), self.currency)

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.amount < self._same_currency(other, "compare")

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency.code!r})"
