"""Conversion between minor units (wire) and major units (form inputs)."""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from .errors import ParseError

# ISO 4217 currencies whose minor unit is not 1/100
_EXPONENTS = {
    "BIF": 0, "CLP": 0, "DJF": 0, "GNF": 0, "ISK": 0, "JPY": 0, "KMF": 0,
    "KRW": 0, "PYG": 0, "RWF": 0, "UGX": 0, "UYI": 0, "VND": 0, "VUV": 0,
    "XAF": 0, "XOF": 0, "XPF": 0,
    "BHD": 3, "IQD": 3, "JOD": 3, "KWD": 3, "LYD": 3, "OMR": 3, "TND": 3,
}
DEFAULT_EXPONENT = 2


def exponent(currency: str) -> int:
    return _EXPONENTS.get(currency.upper(), DEFAULT_EXPONENT)


def to_decimal(value: str | int | float | Decimal, field: str = "amount") -> Decimal:
    if isinstance(value, bool):
        raise ParseError(field, value, "not a number")
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation:
        raise ParseError(field, value, "not a number")
    if not result.is_finite():
        raise ParseError(field, value, "not a finite number")
    return result


def to_minor_units(value: str | int | float | Decimal, currency: str) -> int:
    """Convert a major-unit amount (e.g. ``"12.50"`` EUR) to minor units (1250)."""
    scaled = to_decimal(value) * (Decimal(10) ** exponent(currency))
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def from_minor_units(value: int, currency: str) -> Decimal:
    """Convert minor units back to a major-unit decimal."""
    return Decimal(value).scaleb(-exponent(currency))
