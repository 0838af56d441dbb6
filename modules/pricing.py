"""Price and quantity calculations for goods sold by weight, volume, strip or piece."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, ClassVar, Tuple, Union

from modules import units_of_measure as uom
from modules.units_of_measure import Subunit, UnitFamily
from utils.validation import ValidationError, parse_number

logger = logging.getLogger(__name__)

QUANTITY_TO_PRICE = "quantityToPrice"
PRICE_TO_QUANTITY = "priceToQuantity"
MODES = (QUANTITY_TO_PRICE, PRICE_TO_QUANTITY)

DEFAULT_UNIT_FAMILY = UnitFamily.MASS
DEFAULT_UNIT_PRICE = 300.0
DEFAULT_SUBUNIT_RATIO = 10
DEFAULT_CURRENCY_SYMBOL = "₹"

PRICE_DECIMALS = 2
QUANTITY_DECIMALS = 4


class CalculationError(Exception):
    """Base class for calculation failures; carries the text shown to the operator."""

    kind = "CalculationError"

    def __init__(self, title: str, description: str):
        super().__init__(description)
        self.title = title
        self.description = description


class InvalidInput(CalculationError):
    kind = "InvalidInput"


class DivisionByZero(CalculationError):
    kind = "DivisionByZero"


@dataclass(frozen=True)
class PricingConfig:
    """Business setup the calculator prices against."""
    unit_family: UnitFamily = DEFAULT_UNIT_FAMILY
    base_unit_price: float = DEFAULT_UNIT_PRICE
    subunit_ratio: int = DEFAULT_SUBUNIT_RATIO
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL

    def __post_init__(self):
        object.__setattr__(self, "unit_family", uom.parse_family(self.unit_family))

    @property
    def base_unit(self) -> Subunit:
        return uom.base_unit(self.unit_family)


@dataclass(frozen=True)
class QuantityToPriceRequest:
    quantity: float
    unit: Subunit
    discount_percent: float = 0.0

    mode: ClassVar[str] = QUANTITY_TO_PRICE


@dataclass(frozen=True)
class PriceToQuantityRequest:
    price: float
    unit: Subunit
    discount_percent: float = 0.0

    mode: ClassVar[str] = PRICE_TO_QUANTITY


CalculationRequest = Union[QuantityToPriceRequest, PriceToQuantityRequest]


@dataclass(frozen=True)
class CalculationResult:
    """
    Outcome of a successful calculation.

    `primary_value` is rounded for display (2 places for prices, 4 for
    quantities); `exact_value` keeps full precision for callers that feed the
    value into another calculation.
    """
    mode: str
    primary_value: float
    exact_value: float
    primary_label: str
    breakdown: Tuple[str, ...] = ()

    @property
    def details(self) -> str:
        return "\n".join(self.breakdown)


@dataclass(frozen=True)
class CalculationFailure:
    """Failure value handed to the UI for a message box."""
    kind: str
    title: str
    description: str
    severity: str = "destructive"

    @classmethod
    def from_error(cls, exc: CalculationError) -> "CalculationFailure":
        return cls(kind=exc.kind, title=exc.title, description=exc.description)


CalculationOutcome = Union[CalculationResult, CalculationFailure]


def format_number(value: float) -> str:
    """Render a number without trailing zeros, e.g. 300.0 -> '300', 2.5 -> '2.5'."""
    if float(value).is_integer():
        return str(int(value))
    return str(float(value))


def _require_finite(value: Any, title: str, description: str) -> float:
    if isinstance(value, bool):
        raise InvalidInput(title, description)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInput(title, description)
    if not math.isfinite(number):
        raise InvalidInput(title, description)
    return number


def _check_discount(discount_percent: Any) -> float:
    discount = _require_finite(discount_percent, "Invalid Discount", "Please enter a valid discount.")
    if discount < 0 or discount > 100:
        raise InvalidInput("Invalid Discount", "Discount must be between 0 and 100 percent.")
    return discount


def _check_subunit_ratio(config: PricingConfig) -> int:
    # Only tablet conversions read the ratio, so other families never reject it.
    if config.unit_family is not UnitFamily.MEDICAL_STRIP:
        return config.subunit_ratio
    ratio = _require_finite(
        config.subunit_ratio, "Invalid Tablets per Strip", "Please enter a valid number of tablets per strip."
    )
    if ratio < 1 or not ratio.is_integer():
        raise InvalidInput("Invalid Tablets per Strip", "Tablets per strip must be a whole number of at least 1.")
    return int(ratio)


def _resolve_unit(unit: Subunit | str) -> Subunit:
    try:
        return uom.parse_unit(unit)
    except ValueError:
        raise InvalidInput("Invalid Unit", "Please choose a valid unit.")


def compute_price(
    config: PricingConfig,
    quantity: float,
    unit: Subunit | str,
    discount_percent: float = 0.0,
) -> CalculationResult:
    """
    Price a quantity of goods.

    The quantity is normalized to the family's base unit, multiplied by the
    base unit price, and reduced by the discount percentage.

    Raises:
        InvalidInput: If the unit price, quantity or discount is not usable
    """
    unit_price = _require_finite(config.base_unit_price, "Invalid Price", "Please enter a valid unit price.")
    # Negative quantities price as refunds; -0 is folded into 0.
    qty = _require_finite(quantity, "Invalid Quantity", "Please enter a valid quantity.") + 0.0
    discount = _check_discount(discount_percent)
    ratio = _check_subunit_ratio(config)
    unit = _resolve_unit(unit)

    symbol = config.currency_symbol
    base_symbol = uom.unit_symbol(config.base_unit)

    base_qty = uom.normalize_to_base_unit(config.unit_family, ratio, qty, unit) + 0.0
    gross_price = base_qty * unit_price + 0.0
    breakdown = [
        f"{base_qty:.4f} {base_symbol} × {symbol}{format_number(unit_price)} = {symbol}{gross_price:.2f}",
    ]

    if discount > 0:
        discount_amount = gross_price * discount / 100
        final_price = gross_price - discount_amount + 0.0
        breakdown.append(f"Discount: {symbol}{discount_amount:.2f} ({format_number(discount)}%)")
    else:
        final_price = gross_price

    return CalculationResult(
        mode=QUANTITY_TO_PRICE,
        primary_value=round(final_price, PRICE_DECIMALS),
        exact_value=final_price,
        primary_label=f"{symbol}{final_price:.2f}",
        breakdown=tuple(breakdown),
    )


def compute_quantity(
    config: PricingConfig,
    price: float,
    unit: Subunit | str,
    discount_percent: float = 0.0,
) -> CalculationResult:
    """
    Work out how much of the goods a price buys.

    The price paid is inflated back to the gross (pre-discount) price,
    divided by the base unit price, and expressed in the requested unit.

    Raises:
        InvalidInput: If the unit price, price or discount is not usable
        DivisionByZero: If the discount is 100%
    """
    unit_price = _require_finite(config.base_unit_price, "Invalid Price", "Please enter a valid unit price.")
    if unit_price <= 0:
        raise InvalidInput("Invalid Price", "Unit price must be greater than zero.")
    paid = _require_finite(price, "Invalid Price", "Please enter a valid price.") + 0.0
    if paid < 0:
        raise InvalidInput("Invalid Price", "Price cannot be negative.")
    discount = _check_discount(discount_percent)
    ratio = _check_subunit_ratio(config)
    unit = _resolve_unit(unit)

    if discount == 100:
        raise DivisionByZero(
            "Invalid Discount", "A 100% discount leaves no price to work the quantity back from."
        )

    symbol = config.currency_symbol
    base_symbol = uom.unit_symbol(config.base_unit)

    gross_price = paid / (1 - discount / 100)
    base_qty = gross_price / unit_price
    display_qty = uom.denormalize_from_base_unit(config.unit_family, ratio, base_qty, unit)

    breakdown = (
        f"{symbol}{format_number(paid)} → Effective: {symbol}{gross_price:.2f}",
        f"Qty = {symbol}{gross_price:.2f} ÷ {symbol}{format_number(unit_price)} = {base_qty:.4f} {base_symbol}",
    )
    return CalculationResult(
        mode=PRICE_TO_QUANTITY,
        primary_value=round(display_qty, QUANTITY_DECIMALS),
        exact_value=display_qty,
        primary_label=f"{display_qty:.4f} {uom.unit_symbol(unit)}",
        breakdown=breakdown,
    )


def calculate(config: PricingConfig, request: CalculationRequest) -> CalculationOutcome:
    """Run a calculation request, returning a failure value instead of raising."""
    try:
        if isinstance(request, QuantityToPriceRequest):
            return compute_price(config, request.quantity, request.unit, request.discount_percent)
        if isinstance(request, PriceToQuantityRequest):
            return compute_quantity(config, request.price, request.unit, request.discount_percent)
    except CalculationError as exc:
        logger.info("Calculation rejected (%s): %s", exc.kind, exc.description)
        return CalculationFailure.from_error(exc)
    raise TypeError(f"Unsupported calculation request: {type(request).__name__}")


def _parse_field(text: Any, title: str, description: str, default: float | None = None) -> float:
    try:
        return parse_number(text, default=default)
    except ValidationError:
        raise InvalidInput(title, description)


def parse_request(
    mode: str,
    *,
    unit: Subunit | str,
    quantity_text: str = "",
    price_text: str = "",
    discount_text: str = "0",
) -> CalculationRequest:
    """
    Build a calculation request from the raw text of the calculator form.

    A blank discount counts as 0%.

    Raises:
        InvalidInput: If a field does not hold a number
        ValueError: If `mode` is not one of MODES
    """
    if mode not in MODES:
        raise ValueError(f"Unknown calculation mode: {mode!r}")

    discount = _parse_field(discount_text, "Invalid Discount", "Please enter a valid discount.", default=0.0)
    unit = _resolve_unit(unit)

    if mode == QUANTITY_TO_PRICE:
        quantity = _parse_field(quantity_text, "Invalid Quantity", "Please enter a valid quantity.")
        return QuantityToPriceRequest(quantity=quantity, unit=unit, discount_percent=discount)

    price = _parse_field(price_text, "Invalid Price", "Please enter a valid price.")
    return PriceToQuantityRequest(price=price, unit=unit, discount_percent=discount)


def calculate_from_form(
    config: PricingConfig,
    mode: str,
    *,
    unit: Subunit | str,
    quantity_text: str = "",
    price_text: str = "",
    discount_text: str = "0",
) -> CalculationOutcome:
    """Parse the form fields and run the calculation; every input problem comes back as a failure."""
    try:
        # The unit price is reported ahead of problems in the other fields.
        _require_finite(config.base_unit_price, "Invalid Price", "Please enter a valid unit price.")
        request = parse_request(
            mode,
            unit=unit,
            quantity_text=quantity_text,
            price_text=price_text,
            discount_text=discount_text,
        )
    except CalculationError as exc:
        logger.info("Form rejected (%s): %s", exc.kind, exc.description)
        return CalculationFailure.from_error(exc)
    return calculate(config, request)
