"""Currencies the workshop bills in, with their precision and display symbol."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    decimal_places: int
    name: str
    symbol: str

    @property
    def quantum(self) -> Decimal:
        """Smallest billable unit: Decimal("0.01") for cents, Decimal("1") for none."""
        return Decimal(1).scaleb(-self.decimal_places)

    def quantize(self, amount: Decimal, rounding: str = ROUND_HALF_UP) -> Decimal:
        return amount.quantize(self.quantum, rounding=rounding)


class CurrencyRegistry:
    """
    Lookup of supported ISO 4217 codes.

    EUR is the workshop's billing currency; the others exist for
    customers invoiced abroad and for precision tests (JPY has no
    minor unit).
    """

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        info.code: info
        for info in (
            CurrencyInfo("EUR", 2, "Euro", "€"),
            CurrencyInfo("USD", 2, "US Dollar", "$"),
            CurrencyInfo("GBP", 2, "Pound Sterling", "£"),
            CurrencyInfo("CHF", 2, "Swiss Franc", "CHF"),
            CurrencyInfo("MAD", 2, "Moroccan Dirham", "MAD"),
            CurrencyInfo("JPY", 0, "Japanese Yen", "¥"),
        )
    }

    @classmethod
    def is_valid(cls, code: str) -> bool:
        return code in cls._CURRENCIES

    @classmethod
    def get(cls, code: str) -> CurrencyInfo:
        """
        Raises:
            ValueError: If the code is not a supported currency.
        """
        try:
            return cls._CURRENCIES[code]
        except KeyError:
            raise ValueError(f"Unknown currency: {code}") from None
