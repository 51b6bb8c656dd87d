"""Radio frequency validation for airfields and navaids."""

from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Union

Number = Union[float, str, Decimal]

AIRBAND_MHZ = (Decimal("118"), Decimal("137"))
VOR_MHZ = (Decimal("108"), Decimal("117.95"))
NDB_KHZ = (Decimal("190"), Decimal("1750"))
VOR_CHANNEL_SPACING = Decimal("0.05")


def _in_band(frequency: Number, band) -> Decimal:
    # str() keeps the shortest repr, so 118.025 is not a binary approximation
    freq = Decimal(str(frequency).strip())
    low, high = band
    if not low <= freq <= high:
        raise InvalidOperation
    return freq


def is_valid_airband_frequency(frequency: Number) -> bool:
    """Voice communication band [MHz]: 118 to 137 with at most 3 decimals."""
    try:
        freq = _in_band(frequency, AIRBAND_MHZ)
    except InvalidOperation:
        return False
    return freq == freq.quantize(Decimal("0.001"), rounding=ROUND_DOWN)


def is_valid_vor_frequency(frequency: Number) -> bool:
    """VOR band [MHz]: 108 to 117.95 on 50 kHz channels."""
    try:
        freq = _in_band(frequency, VOR_MHZ)
    except InvalidOperation:
        return False
    return freq % VOR_CHANNEL_SPACING == 0


def is_valid_ndb_frequency(frequency: Number) -> bool:
    """NDB band [kHz]: 190 to 1750."""
    try:
        _in_band(frequency, NDB_KHZ)
    except InvalidOperation:
        return False
    return True
