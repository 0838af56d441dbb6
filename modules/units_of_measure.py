"""Unit families, subunits and the conversion factor table."""
from __future__ import annotations

from enum import Enum
from fractions import Fraction


class UnitFamily(str, Enum):
    MASS = "mass"
    VOLUME = "volume"
    MEDICAL_STRIP = "medicalStrip"
    PIECE = "piece"


class Subunit(str, Enum):
    KILOGRAM = "kilogram"
    GRAM = "gram"
    TONNE = "tonne"
    LITRE = "litre"
    MILLILITRE = "millilitre"
    STRIP = "strip"
    TABLET = "tablet"
    PIECE = "piece"


# Short labels shown next to quantities, e.g. "2.5000 kg".
UNIT_SYMBOLS = {
    Subunit.KILOGRAM: "kg",
    Subunit.GRAM: "gm",
    Subunit.TONNE: "tonne",
    Subunit.LITRE: "litre",
    Subunit.MILLILITRE: "ml",
    Subunit.STRIP: "strip",
    Subunit.TABLET: "tablet",
    Subunit.PIECE: "piece",
}

FAMILY_LABELS = {
    UnitFamily.MASS: "Kilogram (kg)",
    UnitFamily.VOLUME: "Litre",
    UnitFamily.MEDICAL_STRIP: "Strip (Medical)",
    UnitFamily.PIECE: "Piece",
}

# First entry is the family's base unit.
FAMILY_UNITS = {
    UnitFamily.MASS: (Subunit.KILOGRAM, Subunit.GRAM, Subunit.TONNE),
    UnitFamily.VOLUME: (Subunit.LITRE, Subunit.MILLILITRE),
    UnitFamily.MEDICAL_STRIP: (Subunit.STRIP, Subunit.TABLET),
    UnitFamily.PIECE: (Subunit.PIECE,),
}

# Multiply a quantity in `unit` by the factor to get the family's base unit.
# None marks the tablet factor, which depends on the configured subunit ratio.
CONVERSION_FACTORS = {
    (UnitFamily.MASS, Subunit.GRAM): Fraction(1, 1000),
    (UnitFamily.MASS, Subunit.TONNE): Fraction(1000),
    (UnitFamily.VOLUME, Subunit.MILLILITRE): Fraction(1, 1000),
    (UnitFamily.MEDICAL_STRIP, Subunit.TABLET): None,
}

IDENTITY_FACTOR = Fraction(1)

# Tokens written to the settings table by earlier releases.
_LEGACY_FAMILY_TOKENS = {
    "kg": UnitFamily.MASS,
    "litre": UnitFamily.VOLUME,
    "strip": UnitFamily.MEDICAL_STRIP,
    "piece": UnitFamily.PIECE,
}


def parse_family(token: str | UnitFamily) -> UnitFamily:
    """Resolve a family from its enum token or a legacy unit-name token."""
    if isinstance(token, UnitFamily):
        return token
    cleaned = str(token).strip()
    try:
        return UnitFamily(cleaned)
    except ValueError:
        pass
    legacy = _LEGACY_FAMILY_TOKENS.get(cleaned.lower())
    if legacy is None:
        raise ValueError(f"Unknown unit family: {token!r}")
    return legacy


def parse_unit(token: str | Subunit) -> Subunit:
    """Resolve a subunit from its name or its display symbol."""
    if isinstance(token, Subunit):
        return token
    cleaned = str(token).strip().lower()
    for unit in Subunit:
        if cleaned in (unit.value, UNIT_SYMBOLS[unit]):
            return unit
    raise ValueError(f"Unknown unit: {token!r}")


def units_for_family(family: UnitFamily) -> tuple[Subunit, ...]:
    """Return the selectable units for a family, base unit first."""
    return FAMILY_UNITS.get(family, ())


def base_unit(family: UnitFamily) -> Subunit:
    return FAMILY_UNITS[family][0]


def coerce_unit(family: UnitFamily, unit: Subunit | None) -> Subunit:
    """Keep `unit` if the family offers it, otherwise fall back to the base unit."""
    if unit in units_for_family(family):
        return unit
    return base_unit(family)


def unit_symbol(unit: Subunit) -> str:
    return UNIT_SYMBOLS.get(unit, str(unit.value))


def conversion_factor(family: UnitFamily, subunit_ratio: int, unit: Subunit) -> Fraction:
    """
    Return the factor converting `unit` to the family's base unit.

    Pairs missing from the table (base units, and units that do not belong to
    the family) convert with the identity factor.
    """
    key = (family, unit)
    if key not in CONVERSION_FACTORS:
        return IDENTITY_FACTOR
    factor = CONVERSION_FACTORS[key]
    if factor is None:
        return 1 / Fraction(subunit_ratio)
    return factor


def inverse_factor(family: UnitFamily, subunit_ratio: int, unit: Subunit) -> Fraction:
    """Return the factor converting a base-unit quantity back into `unit`."""
    return 1 / conversion_factor(family, subunit_ratio, unit)


def _scale(quantity: float, factor: Fraction) -> float:
    return quantity * factor.numerator / factor.denominator


def normalize_to_base_unit(
    family: UnitFamily,
    subunit_ratio: int,
    quantity: float,
    unit: Subunit,
) -> float:
    """Convert `quantity` expressed in `unit` to the family's base unit."""
    return _scale(quantity, conversion_factor(family, subunit_ratio, unit))


def denormalize_from_base_unit(
    family: UnitFamily,
    subunit_ratio: int,
    base_quantity: float,
    unit: Subunit,
) -> float:
    """Express a base-unit quantity in `unit`."""
    return _scale(base_quantity, inverse_factor(family, subunit_ratio, unit))
