"""
Emissions Classifier - Assign the DGT environmental label to a vehicle.

Spain's traffic authority (DGT) issues four stickers, plus "no sticker",
from the powertrain and the year of first registration:

    ZERO  (CERO)            battery electric, or plug-in hybrid with >40 km
                            of electric range
    ECO                     other plug-ins, hybrids, CNG / LPG
    C                       gasoline from 2006, diesel from 2014
    B                       gasoline 2001-2005, diesel 2006-2013
    NONE  (SIN_DISTINTIVO)  everything else, including missing data

Fuel types arrive as free text ("Gasolina", "Diésel", "Híbrido", "EV"...)
and are parsed once, by ``normalize_fuel_type``, into the closed
``FuelType`` enum.  The decision table then works on the enum only.

Missing or unrecognised inputs never raise: the business rule is
"unknown means no sticker".  The classifier never reads the wall clock.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from workshop_engines.tracer import traced_engine
from workshop_kernel.logging_config import get_logger

logger = get_logger("engines.emissions")

PLUGIN_ZERO_RANGE_KM = 40

GASOLINE_C_FROM = 2006
GASOLINE_B_FROM = 2001
DIESEL_C_FROM = 2014
DIESEL_B_FROM = 2006


class FuelType(str, Enum):
    """Powertrain category recognised by the label rules."""

    ELECTRIC = "electric"
    HYBRID = "hybrid"
    COMPRESSED_GAS = "compressed_gas"
    GASOLINE = "gasoline"
    DIESEL = "diesel"
    UNKNOWN = "unknown"


# Keyword sets, checked in this order; the first category with a match wins.
# "bev" and "ev" match only as the whole value, so "hev"/"phev" stay hybrids.
_ELECTRIC_SUBSTRINGS = ("eléctrico", "electrico")
_ELECTRIC_EXACT = frozenset({"bev", "ev"})
_FUEL_KEYWORDS: tuple[tuple[FuelType, tuple[str, ...]], ...] = (
    (FuelType.HYBRID, ("híbrido", "hibrido", "hybrid", "hev", "phev")),
    (FuelType.COMPRESSED_GAS, ("gnc", "glp", "gas natural", "gas licuado")),
    (FuelType.GASOLINE, ("gasolina", "gasoline", "petrol")),
    (FuelType.DIESEL, ("diésel", "diesel", "gasoil", "gasóleo")),
)


def normalize_fuel_type(raw: str | None) -> FuelType:
    """
    Parse a free-text fuel description into a FuelType.

    Case-insensitive; surrounding whitespace is ignored.  None, empty and
    unrecognised text all yield UNKNOWN.
    """
    if not raw:
        return FuelType.UNKNOWN
    text = raw.strip().lower()
    if not text:
        return FuelType.UNKNOWN

    if text in _ELECTRIC_EXACT or any(k in text for k in _ELECTRIC_SUBSTRINGS):
        return FuelType.ELECTRIC
    for fuel_type, keywords in _FUEL_KEYWORDS:
        if any(k in text for k in keywords):
            return fuel_type
    return FuelType.UNKNOWN


@dataclass(frozen=True)
class LabelInfo:
    """Display data for a label; never stored, always re-derived."""

    identifier: str
    display_name: str
    color: str
    description: str


class EmissionsLabel(str, Enum):
    """
    DGT environmental label, ordered best to worst.

    Values are the identifiers persisted on the vehicle record.
    """

    ZERO = "CERO"
    ECO = "ECO"
    C = "C"
    B = "B"
    NONE = "SIN_DISTINTIVO"

    @property
    def rank(self) -> int:
        """0 for ZERO up to 4 for NONE."""
        return _RANK[self]

    @property
    def info(self) -> LabelInfo:
        return LABEL_INFO[self]

    @property
    def display_name(self) -> str:
        return LABEL_INFO[self].display_name

    @property
    def color(self) -> str:
        return LABEL_INFO[self].color

    @property
    def description(self) -> str:
        return LABEL_INFO[self].description

    def is_better_than(self, other: EmissionsLabel) -> bool:
        return self.rank < other.rank


_RANK = {label: position for position, label in enumerate(EmissionsLabel)}

LABEL_INFO: dict[EmissionsLabel, LabelInfo] = {
    EmissionsLabel.ZERO: LabelInfo(
        identifier="CERO",
        display_name="CERO EMISIONES",
        color="blue",
        description="Vehículo eléctrico puro o híbrido enchufable con autonomía >40km",
    ),
    EmissionsLabel.ECO: LabelInfo(
        identifier="ECO",
        display_name="ECO",
        color="eco",
        description="Vehículo híbrido, GNC o GLP",
    ),
    EmissionsLabel.C: LabelInfo(
        identifier="C",
        display_name="C",
        color="green",
        description="Gasolina desde 2006 o diésel desde 2014",
    ),
    EmissionsLabel.B: LabelInfo(
        identifier="B",
        display_name="B",
        color="yellow",
        description="Gasolina 2001-2005 o diésel 2006-2013",
    ),
    EmissionsLabel.NONE: LabelInfo(
        identifier="SIN_DISTINTIVO",
        display_name="SIN DISTINTIVO",
        color="gray",
        description="Vehículo sin etiqueta ambiental",
    ),
}


@dataclass(frozen=True)
class VehicleFuelProfile:
    """
    Classifier input: the four vehicle facts the label depends on.

    fuel_type is the raw free-text value as stored on the vehicle.
    """

    model_year: int | None
    fuel_type: str | None
    is_plugin_hybrid: bool = False
    electric_range_km: int | None = None

    @property
    def fuel(self) -> FuelType:
        return normalize_fuel_type(self.fuel_type)


def _by_year(year: int, c_from: int, b_from: int) -> EmissionsLabel:
    if year >= c_from:
        return EmissionsLabel.C
    if year >= b_from:
        return EmissionsLabel.B
    return EmissionsLabel.NONE


@traced_engine(
    "emissions",
    "1.0",
    fingerprint_fields=("profile",),
)
def classify(profile: VehicleFuelProfile) -> EmissionsLabel:
    """
    Apply the label decision table; the first matching rule wins.

    Total over its input type: missing year or fuel, and unrecognised
    fuel text, yield EmissionsLabel.NONE.
    """
    year = profile.model_year
    if not year or year < 1 or not profile.fuel_type or not profile.fuel_type.strip():
        return EmissionsLabel.NONE

    fuel = profile.fuel
    if fuel is FuelType.ELECTRIC:
        return EmissionsLabel.ZERO
    if profile.is_plugin_hybrid:
        if profile.electric_range_km is not None and profile.electric_range_km > PLUGIN_ZERO_RANGE_KM:
            return EmissionsLabel.ZERO
        return EmissionsLabel.ECO
    if fuel in (FuelType.HYBRID, FuelType.COMPRESSED_GAS):
        return EmissionsLabel.ECO
    if fuel is FuelType.GASOLINE:
        return _by_year(year, GASOLINE_C_FROM, GASOLINE_B_FROM)
    if fuel is FuelType.DIESEL:
        return _by_year(year, DIESEL_C_FROM, DIESEL_B_FROM)
    return EmissionsLabel.NONE


def label_info(label: EmissionsLabel | str | None) -> LabelInfo:
    """
    Display data for a label or a stored label identifier.

    Unknown or missing identifiers resolve to the SIN_DISTINTIVO entry.
    """
    if isinstance(label, EmissionsLabel):
        return LABEL_INFO[label]
    try:
        return LABEL_INFO[EmissionsLabel((label or "").strip().upper())]
    except ValueError:
        logger.debug("unknown_label_identifier", extra={"identifier": label})
        return LABEL_INFO[EmissionsLabel.NONE]


class EmissionsClassifier:
    """Stateless classifier object for injection into services."""

    def classify(self, profile: VehicleFuelProfile) -> EmissionsLabel:
        return classify(profile)

    def label_info(self, label: EmissionsLabel | str | None) -> LabelInfo:
        return label_info(label)
