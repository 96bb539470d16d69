"""Money display helpers. Amounts are integers in minor units (cents)."""

from decimal import Decimal
from typing import Optional

from babel import Locale, UnknownLocaleError
from babel.numbers import format_currency

from ..core.config import settings

LOCALE_MAP: dict[str, str] = {
    "en": "en_US",
    "es": "es_ES",
    "fr": "fr_FR",
    "ar": "ar",
    "zh": "zh_CN",
}
DEFAULT_LOCALE = "en_US"

UNKNOWN_SHIPPING = "—"
FREE_SHIPPING = "Free"


def resolve_locale(locale: Optional[str]) -> str:
    """Map a site language code or a Babel locale identifier to a Babel locale"""
    if not locale:
        return DEFAULT_LOCALE
    if locale in LOCALE_MAP:
        return LOCALE_MAP[locale]
    try:
        return str(Locale.parse(locale, sep="-" if "-" in locale else "_"))
    except (UnknownLocaleError, ValueError):
        return DEFAULT_LOCALE


def format_minor_units(amount: int, locale: Optional[str] = None, currency: Optional[str] = None) -> str:
    """Render minor units as a localized currency string.

    The currency is the same for every locale; only number formatting
    changes. No conversion happens.
    """
    return format_currency(
        Decimal(amount) / 100,
        currency or settings.currency,
        locale=resolve_locale(locale or settings.default_locale),
    )


def shipping_inclusive_total(
    subtotal_minor_units: int,
    shipping_minor_units: Optional[int],
    fallback_shipping_minor_units: Optional[int] = None,
) -> int:
    """Subtotal plus shipping, using the fallback while the estimate is unknown"""
    if shipping_minor_units is None:
        if fallback_shipping_minor_units is None:
            fallback_shipping_minor_units = settings.fallback_shipping_minor_units
        return subtotal_minor_units + fallback_shipping_minor_units
    return subtotal_minor_units + shipping_minor_units


def format_shipping(shipping_minor_units: Optional[int], locale: Optional[str] = None) -> str:
    """Unknown shipping renders as an em-dash, confirmed zero as "Free\""""
    if shipping_minor_units is None:
        return UNKNOWN_SHIPPING
    if shipping_minor_units == 0:
        return FREE_SHIPPING
    return format_minor_units(shipping_minor_units, locale)


def amount_until_free_shipping(subtotal_minor_units: int, threshold_minor_units: Optional[int] = None) -> int:
    """Minor units still missing for the free-shipping hint, 0 once reached"""
    if threshold_minor_units is None:
        threshold_minor_units = settings.free_shipping_threshold_minor_units
    return max(threshold_minor_units - subtotal_minor_units, 0)
