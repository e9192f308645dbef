"""Decimal helpers for currency amounts."""

from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0")

# ISO 4217 zero-decimal currencies. Money columns hold two decimals, so
# three-decimal currencies (KWD, BHD and the like) round to two.
_MINOR_UNITS = {
    "BIF": 0, "CLP": 0, "DJF": 0, "GNF": 0, "ISK": 0, "JPY": 0, "KMF": 0, "KRW": 0,
    "PYG": 0, "RWF": 0, "UGX": 0, "VND": 0, "VUV": 0, "XAF": 0, "XOF": 0, "XPF": 0,
}

_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "AUD": "A$",
    "CAD": "CA$",
}


def to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def minor_unit_exponent(currency: str | None) -> Decimal:
    digits = _MINOR_UNITS.get((currency or "").upper(), 2)
    return Decimal(1).scaleb(-digits)


def quantize_amount(value, currency: str | None = None) -> Decimal:
    """Round half-up to the currency's minor unit."""
    return to_decimal(value).quantize(minor_unit_exponent(currency), rounding=ROUND_HALF_UP)


def format_currency(amount, currency: str | None = "INR") -> str:
    code = (currency or "INR").upper()
    value = quantize_amount(amount, code)
    digits = _MINOR_UNITS.get(code, 2)
    sign = "-" if value < 0 else ""
    number = f"{abs(value):,.{digits}f}"
    symbol = _SYMBOLS.get(code)
    if symbol:
        return f"{sign}{symbol}{number}"
    return f"{sign}{code} {number}"


def format_plain(amount, currency: str | None = "INR") -> str:
    """Currency code prefix instead of a symbol, for renderers limited to Latin-1."""
    code = (currency or "INR").upper()
    digits = _MINOR_UNITS.get(code, 2)
    return f"{code} {quantize_amount(amount, code):,.{digits}f}"
