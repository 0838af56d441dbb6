"""Persisted calculator settings stored in the key-value settings table."""
from __future__ import annotations

import logging
from typing import Optional

import pycountry

from database.init_db import get_connection
from modules import units_of_measure as uom
from modules.pricing import (
    DEFAULT_CURRENCY_SYMBOL,
    DEFAULT_SUBUNIT_RATIO,
    DEFAULT_UNIT_FAMILY,
    DEFAULT_UNIT_PRICE,
    PricingConfig,
    format_number,
)
from utils.audit import audit_logger
from utils.validation import ValidationError, sanitize_string, validate_integer, validate_numeric

logger = logging.getLogger(__name__)

UNIT_NAME_KEY = "unit_name"
UNIT_PRICE_KEY = "unit_price"
SUBUNIT_COUNT_KEY = "subunit_count"
CURRENCY_SYMBOL_KEY = "currency_symbol"
CURRENCY_CODE_KEY = "currency_code"

# pycountry has no symbols; common codes are mapped by hand.
CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "KES": "KSh",
    "JPY": "¥",
    "CNY": "¥",
    "PKR": "Rs",
    "BDT": "৳",
    "NPR": "Rs",
}


def get_setting(key: str, default: Optional[str] = None) -> Optional[str]:
    """Return the stored value for `key`, or `default` if it was never saved."""
    with get_connection() as conn:
        row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
    return row[0] if row else default


def set_setting(key: str, value: str) -> None:
    with get_connection() as conn:
        conn.execute(
            "INSERT OR REPLACE INTO settings (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)",
            (key, str(value)),
        )
        conn.commit()


def load_pricing_config() -> PricingConfig:
    """
    Build the pricing config from saved settings, using defaults for missing keys.

    An unreadable unit price is kept as NaN so the calculator reports it when
    the operator next calculates; an unreadable family or ratio falls back to
    its default.
    """
    family_token = get_setting(UNIT_NAME_KEY, DEFAULT_UNIT_FAMILY.value)
    price_text = get_setting(UNIT_PRICE_KEY, format_number(DEFAULT_UNIT_PRICE))
    ratio_text = get_setting(SUBUNIT_COUNT_KEY, str(DEFAULT_SUBUNIT_RATIO))
    symbol = get_setting(CURRENCY_SYMBOL_KEY, DEFAULT_CURRENCY_SYMBOL) or DEFAULT_CURRENCY_SYMBOL

    try:
        family = uom.parse_family(family_token)
    except ValueError:
        logger.warning(f"Unknown unit family {family_token!r} in settings, using {DEFAULT_UNIT_FAMILY.value}")
        family = DEFAULT_UNIT_FAMILY

    try:
        unit_price = float(price_text)
    except (TypeError, ValueError):
        logger.warning(f"Unreadable unit price {price_text!r} in settings")
        unit_price = float("nan")

    try:
        subunit_ratio = validate_integer(ratio_text, min_value=1)
    except ValidationError:
        logger.warning(f"Unreadable subunit count {ratio_text!r} in settings, using {DEFAULT_SUBUNIT_RATIO}")
        subunit_ratio = DEFAULT_SUBUNIT_RATIO

    return PricingConfig(
        unit_family=family,
        base_unit_price=unit_price,
        subunit_ratio=subunit_ratio,
        currency_symbol=symbol,
    )


def save_pricing_config(unit_family, unit_price, subunit_count) -> PricingConfig:
    """
    Validate and persist the business setup.

    Args:
        unit_family: Family token (e.g. "mass") or UnitFamily
        unit_price: Base price per unit, must be greater than zero
        subunit_count: Tablets per strip, a whole number of at least 1

    Returns:
        The saved PricingConfig

    Raises:
        ValidationError: If any value is invalid
    """
    try:
        family = uom.parse_family(unit_family)
    except ValueError:
        raise ValidationError(f"Unknown unit: {unit_family}")
    price = validate_numeric(unit_price, min_value=0, allow_zero=False)
    ratio = validate_integer(subunit_count, min_value=1)

    new_values = {
        UNIT_NAME_KEY: family.value,
        UNIT_PRICE_KEY: format_number(price),
        SUBUNIT_COUNT_KEY: str(ratio),
    }

    with get_connection() as conn:
        old_values = {
            key: value
            for key, value in conn.execute(
                "SELECT key, value FROM settings WHERE key IN (?, ?, ?)", tuple(new_values)
            ).fetchall()
        }
        conn.executemany(
            "INSERT OR REPLACE INTO settings (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)",
            list(new_values.items()),
        )
        conn.commit()

    logger.info(f"Saved pricing settings: {family.value} at {new_values[UNIT_PRICE_KEY]}, {ratio} per strip")
    audit_logger.log_action(
        "UPDATE" if old_values else "CREATE",
        table_name="settings",
        record_key="pricing",
        old_values=old_values or None,
        new_values=new_values,
    )
    return PricingConfig(
        unit_family=family,
        base_unit_price=price,
        subunit_ratio=ratio,
        currency_symbol=get_currency_symbol(),
    )


def get_currency_symbol() -> str:
    return get_setting(CURRENCY_SYMBOL_KEY, DEFAULT_CURRENCY_SYMBOL) or DEFAULT_CURRENCY_SYMBOL


def resolve_currency(entry: str) -> tuple[Optional[str], str]:
    """
    Turn a currency entry into (code, symbol).

    A three-letter ISO 4217 code is looked up with pycountry and mapped to its
    symbol; anything else is used as a literal symbol with no code.

    Raises:
        ValidationError: If the entry is empty or longer than 8 characters
    """
    cleaned = sanitize_string(entry or "", max_length=8)
    # Markup characters are stripped, so check emptiness on the cleaned value.
    if not cleaned:
        raise ValidationError("Currency symbol cannot be empty")

    if len(cleaned) == 3 and cleaned.isalpha() and cleaned.isupper():
        currency = pycountry.currencies.get(alpha_3=cleaned)
        if currency:
            return currency.alpha_3, CURRENCY_SYMBOLS.get(currency.alpha_3, currency.alpha_3)

    return None, cleaned


def save_currency(entry: str) -> str:
    """Persist the display currency and return the symbol that will be shown."""
    code, symbol = resolve_currency(entry)
    previous = get_currency_symbol()

    with get_connection() as conn:
        conn.execute(
            "INSERT OR REPLACE INTO settings (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)",
            (CURRENCY_SYMBOL_KEY, symbol),
        )
        if code:
            conn.execute(
                "INSERT OR REPLACE INTO settings (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)",
                (CURRENCY_CODE_KEY, code),
            )
        conn.commit()

    logger.info(f"Currency symbol set to {symbol}")
    audit_logger.log_action(
        "UPDATE",
        table_name="settings",
        record_key=CURRENCY_SYMBOL_KEY,
        old_values={CURRENCY_SYMBOL_KEY: previous},
        new_values={CURRENCY_SYMBOL_KEY: symbol, CURRENCY_CODE_KEY: code},
    )
    return symbol


def currency_codes() -> list[str]:
    """Return ISO 4217 codes for the currency picker, sorted."""
    return sorted(currency.alpha_3 for currency in pycountry.currencies)
