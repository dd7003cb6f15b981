from __future__ import annotations
"""Decimal helpers for BRL amounts.

Parsing is lenient on purpose: the configurator must always render a number, so
anything unparseable degrades to the supplied fallback instead of raising. That
includes magnitudes outside +/-10^15, which keeps every derived total well inside
what round2 can quantize.
"""
from decimal import Decimal, InvalidOperation, Overflow, ROUND_HALF_UP, localcontext
from typing import Any, Dict, Optional
import re

CENT = Decimal('0.01')
ZERO = Decimal('0')

# accepted inputs have an adjusted exponent within +/- this many digits
MAX_EXPONENT = 15
# quantize headroom for products/quotients of bounded inputs
_ROUNDING_PRECISION = 60

# Write-time ratios applied to the list price (12%, 4%, 15%, 4% off)
EXEMPTION_RATIOS = {
    'pcd_ipi_icms': Decimal('0.88'),
    'pcd_ipi': Decimal('0.96'),
    'taxi_ipi_icms': Decimal('0.85'),
    'taxi_ipi': Decimal('0.96'),
}
FREE_ZONE_RATIO = Decimal('0.85')

_PT_BR_AMOUNT = re.compile(r'^-?\d{1,3}(\.\d{3})*(,\d+)?$|^-?\d+(,\d+)?$')


def round2(value: Decimal) -> Decimal:
    """Round to cents (half up). Anything that cannot be represented becomes 0."""
    with localcontext() as ctx:
        ctx.prec = _ROUNDING_PRECISION
        ctx.traps[InvalidOperation] = False
        ctx.traps[Overflow] = False
        result = value.quantize(CENT, rounding=ROUND_HALF_UP)
    return result if result.is_finite() else ZERO


def _in_range(value: Decimal) -> bool:
    return not value or -MAX_EXPONENT <= value.adjusted() <= MAX_EXPONENT


def parse_decimal(value: Any, fallback: Optional[Decimal] = ZERO) -> Optional[Decimal]:
    """Best-effort conversion to Decimal.

    Accepts Decimal/int/float, plain strings ('1234.5'), and pt-BR formatted
    strings ('R$ 1.234,50'). NaN/Infinity, out-of-range magnitudes and garbage
    return fallback.
    """
    if isinstance(value, bool) or value is None:
        return fallback
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return fallback
        try:
            result = Decimal(text)
        except InvalidOperation:
            result = parse_currency(text, fallback=None)
            if result is None:
                return fallback
    else:
        return fallback
    if not result.is_finite() or not _in_range(result):
        return fallback
    return result


def parse_currency(text: str, fallback: Optional[Decimal] = ZERO) -> Optional[Decimal]:
    """Parse 'R$ 1.234,56' style input (dot thousands, comma decimals)."""
    if not isinstance(text, str):
        return fallback
    cleaned = text.replace('R$', '').replace('\xa0', '').replace(' ', '')
    if not cleaned or not _PT_BR_AMOUNT.match(cleaned):
        return fallback
    try:
        return Decimal(cleaned.replace('.', '').replace(',', '.'))
    except InvalidOperation:
        return fallback


def format_currency(value: Any) -> str:
    """Render an amount as pt-BR BRL, e.g. Decimal('1234.5') -> 'R$ 1.234,50'."""
    if isinstance(value, Decimal) and value.is_finite():
        amount = round2(value)
    else:
        amount = round2(parse_decimal(value))
    sign = '-' if amount < 0 else ''
    whole, frac = f'{abs(amount):.2f}'.split('.')
    groups = []
    while len(whole) > 3:
        groups.insert(0, whole[-3:])
        whole = whole[:-3]
    groups.insert(0, whole)
    return f"{sign}R$ {'.'.join(groups)},{frac}"


_MAX_INT = 10 ** MAX_EXPONENT
_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')
_WHOLE_INT = re.compile(r'^\s*([+-]?\d+)\s*$')


def _bounded(number: int) -> Optional[int]:
    return number if -_MAX_INT < number < _MAX_INT else None


def _finite(value) -> bool:
    if isinstance(value, Decimal):
        return value.is_finite()
    return value == value and value not in (float('inf'), float('-inf'))


def parse_quantity(value: Any) -> Optional[int]:
    """Lenient integer: truncates fractions and reads a leading integer from text.

    Returns None for non-numbers and magnitudes of 10^15 or more.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return _bounded(value)
    if isinstance(value, (float, Decimal)):
        if not _finite(value) or abs(value) >= _MAX_INT:
            return None
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if not match or len(match.group(1).lstrip('+-')) > MAX_EXPONENT:
            return None
        return _bounded(int(match.group(1)))
    return None


def parse_strict_int(value: Any) -> Optional[int]:
    """Whole number or None: 2, 2.0 and ' 2 ' qualify; 2.5, '2.9' and '3abc' do not."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return _bounded(value)
    if isinstance(value, (float, Decimal)):
        if not _finite(value) or abs(value) >= _MAX_INT or value != int(value):
            return None
        return int(value)
    if isinstance(value, str):
        match = _WHOLE_INT.match(value)
        if not match or len(match.group(1).lstrip('+-')) > MAX_EXPONENT:
            return None
        return _bounded(int(match.group(1)))
    return None


def derive_exemption_tiers(public_price: Any) -> Dict[str, Decimal]:
    """Tier prices the catalog stores alongside a version's list price."""
    base = parse_decimal(public_price)
    return {name: round2(base * ratio) for name, ratio in EXEMPTION_RATIOS.items()}


__all__ = [
    'round2', 'parse_decimal', 'parse_currency', 'format_currency', 'parse_quantity',
    'parse_strict_int', 'derive_exemption_tiers', 'EXEMPTION_RATIOS', 'FREE_ZONE_RATIO',
    'MAX_EXPONENT', 'ZERO',
]
