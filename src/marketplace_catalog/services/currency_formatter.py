"""Localized price display."""

from decimal import Decimal

from babel.numbers import format_currency

# Display locale per currency; everything else uses DEFAULT_LOCALE
CURRENCY_LOCALES: dict[str, str] = {"MYR": "ms_MY"}
DEFAULT_LOCALE = "en_US"
FALLBACK_CURRENCY = "USD"


def locale_for_currency(currency: str) -> str:
    return CURRENCY_LOCALES.get(currency.upper(), DEFAULT_LOCALE)


def format_minor_units(amount_cents: int, currency: str | None = None) -> str:
    """Format a minor-unit amount as a localized currency string.

    Args:
        amount_cents: Amount in minor units (cents, sen)
        currency: ISO 4217 code, defaults to USD when missing

    Returns:
        Display string such as "$12.50" or "RM12.50"
    """
    code = (currency or FALLBACK_CURRENCY).upper()
    amount = Decimal(amount_cents) / Decimal(100)
    return format_currency(amount, code, locale=locale_for_currency(code))
