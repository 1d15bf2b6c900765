"""
Hypothesis property tests for the tax ledger and the emissions classifier.

Properties:
- Determinism: same lines, same totals
- Additivity: totals of a concatenation equal the sum of the parts
- Order independence: permuting lines does not change totals
- grand_total == subtotal + tax_total at full precision
- Rounding once stays within half a cent of the exact total
- Classifier totality: any profile of the declared types gets a label
- Year monotonicity: a newer combustion vehicle never gets a worse label
"""

from decimal import Decimal

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from workshop_engines.emissions import EmissionsLabel, VehicleFuelProfile, classify
from workshop_engines.tax_ledger import LineKind, PricedLine, compute_totals

quantities = st.decimals(
    min_value=Decimal("0.01"), max_value=Decimal("1000"), places=2, allow_nan=False, allow_infinity=False
)
prices = st.decimals(
    min_value=Decimal("0"), max_value=Decimal("100000"), places=2, allow_nan=False, allow_infinity=False
)
rates = st.sampled_from([Decimal("0"), Decimal("3"), Decimal("7"), Decimal("9.5"), Decimal("15"), Decimal("21")])
kinds = st.sampled_from(list(LineKind))

priced_lines = st.builds(PricedLine, quantities, prices, rates, kinds)
line_lists = st.lists(priced_lines, max_size=30)

fuel_texts = st.one_of(
    st.none(),
    st.text(max_size=20),
    st.sampled_from([
        "Gasolina", "Diésel", "Eléctrico", "EV", "bev", "Híbrido", "PHEV",
        "GLP", "GNC", "gasoil", "petrol", "hev", "  ", "",
    ]),
)
_SUPPRESSED = [HealthCheck.too_slow, HealthCheck.function_scoped_fixture]

profiles = st.builds(
    VehicleFuelProfile,
    model_year=st.one_of(st.none(), st.integers(min_value=-10, max_value=2100)),
    fuel_type=fuel_texts,
    is_plugin_hybrid=st.booleans(),
    electric_range_km=st.one_of(st.none(), st.integers(min_value=-10, max_value=500)),
)


class TestLedgerProperties:

    @given(lines=line_lists)
    @settings(max_examples=200, suppress_health_check=_SUPPRESSED)
    def test_deterministic(self, lines):
        assert compute_totals(lines) == compute_totals(list(lines))

    @given(a=line_lists, b=line_lists)
    @settings(max_examples=200, suppress_health_check=_SUPPRESSED)
    def test_additive(self, a, b):
        whole = compute_totals(a + b)
        part_a = compute_totals(a)
        part_b = compute_totals(b)

        assert whole.subtotal == part_a.subtotal + part_b.subtotal
        assert whole.tax_total == part_a.tax_total + part_b.tax_total
        assert whole.grand_total == part_a.grand_total + part_b.grand_total

    @given(lines=line_lists, data=st.data())
    @settings(max_examples=100, suppress_health_check=_SUPPRESSED)
    def test_order_independent(self, lines, data):
        shuffled = data.draw(st.permutations(lines))

        assert compute_totals(shuffled).grand_total == compute_totals(lines).grand_total

    @given(lines=line_lists)
    @settings(suppress_health_check=_SUPPRESSED)
    def test_grand_total_identity(self, lines):
        totals = compute_totals(lines)

        assert totals.grand_total == totals.subtotal + totals.tax_total

    @given(lines=line_lists)
    @settings(suppress_health_check=_SUPPRESSED)
    def test_single_rounding_within_half_cent(self, lines):
        exact = compute_totals(lines).grand_total.amount
        rounded = compute_totals(lines).rounded().grand_total.amount

        assert abs(rounded - exact) <= Decimal("0.005")

    @given(lines=line_lists)
    @settings(suppress_health_check=_SUPPRESSED)
    def test_rate_breakdown_sums_to_totals(self, lines):
        totals = compute_totals(lines)

        assert sum((b.taxable.amount for b in totals.by_rate), Decimal("0")) == totals.subtotal.amount
        assert sum((b.tax.amount for b in totals.by_rate), Decimal("0")) == totals.tax_total.amount


class TestClassifierProperties:

    @given(profile=profiles)
    @settings(max_examples=500, suppress_health_check=_SUPPRESSED)
    def test_total_over_declared_types(self, profile):
        assert isinstance(classify(profile), EmissionsLabel)

    @given(
        fuel=st.sampled_from(["Gasolina", "Diésel"]),
        year=st.integers(min_value=1950, max_value=2099),
    )
    @settings(suppress_health_check=_SUPPRESSED)
    def test_newer_is_never_worse(self, fuel, year):
        older = classify(VehicleFuelProfile(year, fuel))
        newer = classify(VehicleFuelProfile(year + 1, fuel))

        assert newer.rank <= older.rank

    @given(year=st.integers(min_value=1, max_value=2100), range_km=st.integers(min_value=41, max_value=500))
    @settings(suppress_health_check=_SUPPRESSED)
    def test_long_range_plugin_always_zero(self, year, range_km):
        profile = VehicleFuelProfile(year, "Híbrido", is_plugin_hybrid=True, electric_range_km=range_km)

        assert classify(profile) is EmissionsLabel.ZERO
