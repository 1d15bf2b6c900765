"""
Tax Ledger - Aggregate priced document lines into taxable base, tax and total.

Every repair order, budget and invoice in the workshop is a list of priced
lines (labor hours, parts, sundries), each with its own IGIC/VAT rate.
This engine sums them.

Rounding policy:
    Each line's subtotal (quantity x unit price) and tax
    (subtotal x rate / 100) are computed at full Decimal precision and
    accumulated.  Nothing is rounded until the caller asks for
    ``LedgerTotals.rounded()``, which rounds each total once, to the
    currency precision, with ROUND_HALF_UP.  Rounding per line and then
    summing drifts by up to half a cent per line on long invoices.

Pure functions with no I/O - the only side effect is a trace log record.

Usage:
    from decimal import Decimal
    from workshop_engines.tax_ledger import LineKind, PricedLine, compute_totals

    totals = compute_totals([
        PricedLine(Decimal("2"), Decimal("45.00"), Decimal("7"), LineKind.LABOR),
        PricedLine(Decimal("1"), Decimal("120.50"), Decimal("7"), LineKind.PART),
        PricedLine(Decimal("3"), Decimal("8.25"), Decimal("7"), LineKind.PART),
    ])
    print(totals.tax_total)             # 16.4675 EUR
    print(totals.rounded().tax_total)   # 16.47 EUR
    print(totals.rounded().grand_total) # 251.72 EUR
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType

from workshop_engines.tracer import traced_engine
from workshop_kernel.domain.values import Currency, Money, to_decimal
from workshop_kernel.exceptions import InvalidLineError
from workshop_kernel.logging_config import get_logger

logger = get_logger("engines.tax_ledger")

HUNDRED = Decimal("100")


class LineKind(str, Enum):
    """What a priced line charges for."""

    LABOR = "labor"
    PART = "part"
    OTHER = "other"


@dataclass(frozen=True)
class PricedLine:
    """
    One priced line of a document.

    Immutable value object.  Numeric fields accept Decimal, int or a
    decimal string; floats are refused with TypeError so that no amount
    ever passes through binary floating point.

    Sign is not validated: rejecting negative quantities or prices is the
    caller's input-validation concern.
    """

    quantity: Decimal
    unit_price: Decimal
    tax_rate_percent: Decimal
    kind: LineKind = LineKind.OTHER
    description: str | None = None

    def __post_init__(self) -> None:
        for name in ("quantity", "unit_price", "tax_rate_percent"):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))
        if not isinstance(self.kind, LineKind):
            object.__setattr__(self, "kind", LineKind(self.kind))

    @property
    def line_subtotal(self) -> Decimal:
        """quantity x unit_price, full precision."""
        return self.quantity * self.unit_price

    @property
    def line_tax(self) -> Decimal:
        """line_subtotal x tax_rate_percent / 100, full precision."""
        return self.line_subtotal * self.tax_rate_percent / HUNDRED


@dataclass(frozen=True)
class RateBreakdown:
    """Taxable base and tax accumulated for one tax rate."""

    rate_percent: Decimal
    taxable: Money
    tax: Money

    def rounded(self) -> RateBreakdown:
        return RateBreakdown(self.rate_percent, self.taxable.round(), self.tax.round())


@dataclass(frozen=True)
class LedgerTotals:
    """
    Result of aggregating a list of priced lines.

    Amounts are full precision unless produced by ``rounded()``.
    grand_total == subtotal + tax_total always holds at full precision.
    """

    subtotal: Money
    tax_total: Money
    grand_total: Money
    by_rate: tuple[RateBreakdown, ...] = ()
    by_kind: Mapping[LineKind, Money] = field(default_factory=lambda: MappingProxyType({}))
    line_count: int = 0

    @property
    def currency(self) -> Currency:
        return self.subtotal.currency

    def subtotal_for(self, kind: LineKind) -> Money:
        """Subtotal of the lines of one kind (zero when there are none)."""
        return self.by_kind.get(kind, Money.zero(self.currency))

    def rounded(self) -> LedgerTotals:
        """
        Round every amount once, from its full-precision value.

        The rounded grand_total is rounded from the full-precision grand
        total, so it may differ by a cent from rounded subtotal plus rounded
        tax.  That difference is the expected outcome of rounding once.
        """
        return LedgerTotals(
            subtotal=self.subtotal.round(),
            tax_total=self.tax_total.round(),
            grand_total=self.grand_total.round(),
            by_rate=tuple(b.rounded() for b in self.by_rate),
            by_kind=MappingProxyType({k: v.round() for k, v in self.by_kind.items()}),
            line_count=self.line_count,
        )


def _finite(value: Decimal, field_name: str, index: int) -> Decimal:
    if not isinstance(value, Decimal) or not value.is_finite():
        raise InvalidLineError(field_name, value, line_index=index)
    return value


@traced_engine("tax_ledger", "1.0", fingerprint_fields=("lines", "currency"))
def compute_totals(
    lines: Iterable[PricedLine],
    currency: str | Currency = "EUR",
) -> LedgerTotals:
    """
    Aggregate priced lines into subtotal, tax total and grand total.

    Args:
        lines: Priced lines, possibly empty.
        currency: Currency of every amount on the document.

    Returns:
        LedgerTotals at full precision.  An empty list yields all zeros.

    Raises:
        InvalidLineError: A quantity, unit price or tax rate is NaN or
            infinite.  Carries the field name and the zero-based line index.
    """
    currency = Currency.coerce(currency)

    subtotal = Decimal("0")
    tax_total = Decimal("0")
    rate_taxable: dict[Decimal, Decimal] = {}
    rate_tax: dict[Decimal, Decimal] = {}
    kind_subtotal: dict[LineKind, Decimal] = {}
    count = 0

    for index, line in enumerate(lines):
        quantity = _finite(line.quantity, "quantity", index)
        unit_price = _finite(line.unit_price, "unit_price", index)
        rate = _finite(line.tax_rate_percent, "tax_rate_percent", index)

        line_subtotal = quantity * unit_price
        line_tax = line_subtotal * rate / HUNDRED

        subtotal += line_subtotal
        tax_total += line_tax
        rate_taxable[rate] = rate_taxable.get(rate, Decimal("0")) + line_subtotal
        rate_tax[rate] = rate_tax.get(rate, Decimal("0")) + line_tax
        kind_subtotal[line.kind] = kind_subtotal.get(line.kind, Decimal("0")) + line_subtotal
        count += 1

    grand_total = subtotal + tax_total

    by_rate = tuple(
        RateBreakdown(
            rate_percent=rate,
            taxable=Money(rate_taxable[rate], currency),
            tax=Money(rate_tax[rate], currency),
        )
        for rate in sorted(rate_taxable)
    )

    totals = LedgerTotals(
        subtotal=Money(subtotal, currency),
        tax_total=Money(tax_total, currency),
        grand_total=Money(grand_total, currency),
        by_rate=by_rate,
        by_kind=MappingProxyType(
            {kind: Money(amount, currency) for kind, amount in kind_subtotal.items()}
        ),
        line_count=count,
    )

    logger.debug("ledger_totals_computed", extra={
        "line_count": count,
        "rate_count": len(by_rate),
        "subtotal": str(subtotal),
        "tax_total": str(tax_total),
        "grand_total": str(grand_total),
        "currency": currency.code,
    })

    return totals


class TaxLedger:
    """
    Calculator object wrapping ``compute_totals`` for injection into services.

    Pure - no I/O, no database access.
    """

    def __init__(self, currency: str | Currency = "EUR"):
        self.currency = Currency.coerce(currency)

    def compute(self, lines: Iterable[PricedLine]) -> LedgerTotals:
        """Full-precision totals for the lines in this ledger's currency."""
        return compute_totals(list(lines), currency=self.currency)

    def line_amount(self, line: PricedLine) -> Money:
        """
        Rounded tax-exclusive amount of a single line.

        This is the per-line figure printed on an invoice; document totals
        are never derived from these rounded amounts.
        """
        return Money(line.line_subtotal, self.currency).round()
