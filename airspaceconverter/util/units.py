"""Altitude model and free-text altitude parsing.

Handles the vertical limits used by airspace definitions:
- Altitude: feet (ft), meters (m), flight levels (FL), unlimited
- Reference: above mean sea level (AMSL), above ground level (AGL)
- Conversion to meters AMSL given terrain elevation and QNH
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


# Conversion constants
FEET_TO_METERS = 0.3048
METERS_TO_FEET = 1.0 / FEET_TO_METERS
NAUTICAL_MILES_TO_METERS = 1852.0
METERS_TO_NAUTICAL_MILES = 1.0 / NAUTICAL_MILES_TO_METERS
FLIGHT_LEVEL_TO_FEET = 100.0

QNE = 1013.25  # standard pressure [hPa]
FEET_PER_HPA = 30.0


class Unit(Enum):
    FEET = "FT"
    METERS = "M"


class Reference(Enum):
    AMSL = "AMSL"
    AGL = "AGL"
    FL = "FL"


@dataclass(frozen=True)
class Altitude:
    """Represents a vertical limit with unit and reference awareness.

    Exactly one of ``reference`` and ``unlimited`` is set. Flight levels
    are whole numbers expressed in hundreds of feet.

    Example:
        alt = Altitude.from_feet(2000, agl=True)
        print(alt.to_meters())  # 609.6
        print(alt)  # 2000 FT AGL
    """

    value: float = 0.0
    unit: Unit = Unit.FEET
    reference: Optional[Reference] = Reference.AMSL
    unlimited: bool = False

    def __post_init__(self):
        if self.unlimited == (self.reference is not None):
            raise ValueError("An altitude is either unlimited or has a reference, got %r and %r"
                             % (self.reference, self.unlimited))

    @classmethod
    def from_feet(cls, feet: float, agl: bool = False) -> 'Altitude':
        """Create altitude from feet, truncated to whole feet."""
        return cls(value=int(feet), unit=Unit.FEET, reference=Reference.AGL if agl else Reference.AMSL)

    @classmethod
    def from_meters(cls, meters: float, agl: bool = False) -> 'Altitude':
        """Create altitude from meters."""
        return cls(value=float(meters), unit=Unit.METERS, reference=Reference.AGL if agl else Reference.AMSL)

    @classmethod
    def from_flight_level(cls, fl: float) -> 'Altitude':
        """Create altitude from flight level."""
        return cls(value=int(fl), unit=Unit.FEET, reference=Reference.FL)

    @classmethod
    def ground(cls) -> 'Altitude':
        return cls.from_feet(0, agl=True)

    @classmethod
    def make_unlimited(cls) -> 'Altitude':
        return cls(value=0, unit=Unit.FEET, reference=None, unlimited=True)

    @property
    def is_flight_level(self) -> bool:
        return self.reference is Reference.FL

    @property
    def is_agl(self) -> bool:
        return self.reference is Reference.AGL

    @property
    def is_amsl(self) -> bool:
        return self.reference is Reference.AMSL

    @property
    def is_ground(self) -> bool:
        return self.is_agl and self.value == 0

    def to_feet(self) -> float:
        """Convert to feet, relative to the altitude's own reference."""
        if self.unlimited:
            raise ValueError("Unlimited altitude has no magnitude")
        if self.is_flight_level:
            return self.value * FLIGHT_LEVEL_TO_FEET
        if self.unit is Unit.METERS:
            return self.value * METERS_TO_FEET
        return self.value

    def to_meters(self) -> float:
        """Convert to meters, relative to the altitude's own reference."""
        if self.unlimited:
            raise ValueError("Unlimited altitude has no magnitude")
        if self.unit is Unit.METERS and not self.is_flight_level:
            return self.value
        return self.to_feet() * FEET_TO_METERS

    def to_flight_level(self) -> float:
        """Convert to flight level."""
        if self.is_flight_level:
            return self.value
        return self.to_feet() / FLIGHT_LEVEL_TO_FEET

    def to_amsl_meters(self, terrain_meters: float = 0.0, qnh: float = QNE,
                       unlimited_meters: float = 30000.0) -> float:
        """Resolve the altitude to meters above mean sea level.

        Args:
            terrain_meters: Terrain elevation below the point, used for AGL
            qnh: Local pressure setting [hPa], used for flight levels
            unlimited_meters: Value used to represent an unlimited top

        Returns:
            Altitude in meters AMSL
        """
        if self.unlimited:
            return unlimited_meters
        if self.is_flight_level:
            return (self.to_feet() + (qnh - QNE) * FEET_PER_HPA) * FEET_TO_METERS
        if self.is_agl:
            return self.to_meters() + terrain_meters
        return self.to_meters()

    def __str__(self) -> str:
        if self.unlimited:
            return "UNLIMITED"
        if self.is_flight_level:
            return "FL%d" % self.value
        if self.value == 0 and self.unit is Unit.FEET:
            return "GND" if self.is_agl else "MSL"
        return "%s %s %s" % (_format_number(self.value), self.unit.value, self.reference.value)


def _format_number(value: float) -> str:
    # repr is the shortest text that parses back to the same float
    if float(value).is_integer():
        return "%d" % value
    return repr(float(value))


# Tokenizer

NUMBER = "number"
WORD = "word"
SEPARATORS = (" ", "\t", "=")

UNLIMITED_WORDS = frozenset(["UNLIM", "UNLIMITED", "UNL"])

# Keywords accepted as the first word, before any magnitude
LEADING_KEYWORDS = {
    "FL": Reference.FL,
    "GND": Reference.AGL,
    "SFC": Reference.AGL,
    "MSL": Reference.AMSL,
    "AMSL": Reference.AMSL,
}

# Keywords accepted as reference suffix, after the magnitude
REFERENCE_KEYWORDS = {
    "AGL": Reference.AGL,
    "AGND": Reference.AGL,
    "ASFC": Reference.AGL,
    "GND": Reference.AGL,
    "SFC": Reference.AGL,
    "MSL": Reference.AMSL,
    "AMSL": Reference.AMSL,
    "ALT": Reference.AMSL,
}

UNIT_KEYWORDS = {
    "FT": Unit.FEET,
    "F": Unit.FEET,
    "M": Unit.METERS,
    "MT": Unit.METERS,
}


def _is_numeric(c: str) -> bool:
    return c.isdigit() or c in ".-"


def tokenize_altitude(text: str) -> List[Tuple[str, str]]:
    """Split altitude text into classified runs.

    A run ends on a separator, at the end of the text or when the character
    class changes between numeric and alphabetic.

    Example:
        tokenize_altitude("2000ft AGL")
        # [('number', '2000'), ('word', 'FT'), ('word', 'AGL')]
    """
    tokens = []
    current = ""
    kind = None
    for c in text:
        if c in SEPARATORS:
            if current:
                tokens.append((kind, current))
            current, kind = "", None
            continue
        c_kind = NUMBER if _is_numeric(c) else WORD
        if current and c_kind != kind:
            tokens.append((kind, current))
            current = ""
        current += c.upper()
        kind = c_kind
    if current:
        tokens.append((kind, current))
    return tokens


class ParserState(Enum):
    START = "start"                        # nothing read yet
    FLIGHT_LEVEL = "flight level"          # FL read, magnitude expected
    MAGNITUDE = "magnitude"                # magnitude read, reference and unit open
    REFERENCE = "reference"                # magnitude and reference read, unit open
    UNIT = "unit"                          # magnitude and unit read, reference open
    DONE = "done"


# Keywords accepted in each state, in priority order
STATE_KEYWORDS = {
    ParserState.START: (LEADING_KEYWORDS,),
    ParserState.FLIGHT_LEVEL: (),
    ParserState.MAGNITUDE: (REFERENCE_KEYWORDS, {"FL": Reference.FL}, UNIT_KEYWORDS),
    ParserState.REFERENCE: (UNIT_KEYWORDS,),
    ParserState.UNIT: (REFERENCE_KEYWORDS,),
}


class _AltitudeParser:
    """Finite-state parser over the magnitude, reference and unit slots."""

    def __init__(self, text: str):
        self.text = text
        self.magnitude: Optional[float] = None
        self.reference: Optional[Reference] = None
        self.unit: Optional[Unit] = None

    @property
    def state(self) -> ParserState:
        if self.magnitude is None:
            return ParserState.FLIGHT_LEVEL if self.reference is Reference.FL else ParserState.START
        if self.reference is Reference.FL:
            return ParserState.DONE
        if self.reference is None:
            return ParserState.MAGNITUDE if self.unit is None else ParserState.UNIT
        return ParserState.REFERENCE if self.unit is None else ParserState.DONE

    def fail(self, reason: str, token: str) -> None:
        logger.warning("Failed to parse altitude '%s': %s '%s'", self.text, reason, token)

    def on_number(self, token: str) -> bool:
        if self.magnitude is not None:
            self.fail("duplicate magnitude", token)
            return False
        try:
            self.magnitude = float(token)
        except ValueError:
            self.fail("invalid number", token)
            return False
        return True

    def on_word(self, token: str) -> bool:
        state = self.state
        for table in STATE_KEYWORDS[state]:
            if token not in table:
                continue
            value = table[token]
            if isinstance(value, Unit):
                self.unit = value
            else:
                self.reference = value
                if state is ParserState.START and value is not Reference.FL:
                    # surface or sea level
                    self.magnitude = 0.0
                    self.unit = Unit.FEET
            return True
        self.fail("unexpected keyword", token)
        return False

    def run(self) -> Optional[Altitude]:
        tokens = tokenize_altitude(self.text)
        if not tokens:
            logger.warning("Failed to parse altitude: empty text")
            return None
        if any(kind == WORD and token in UNLIMITED_WORDS for kind, token in tokens):
            return Altitude.make_unlimited()
        for kind, token in tokens:
            ok = self.on_number(token) if kind == NUMBER else self.on_word(token)
            if not ok:
                return None
            if self.state is ParserState.DONE:
                break
        if self.magnitude is None:
            self.fail("missing magnitude", self.text)
            return None
        if self.reference is Reference.FL:
            return Altitude.from_flight_level(self.magnitude)
        agl = self.reference is Reference.AGL
        if self.unit is Unit.METERS:
            return Altitude.from_meters(self.magnitude, agl)
        return Altitude.from_feet(self.magnitude, agl)


def parse_altitude(text: str) -> Optional[Altitude]:
    """Parse a free-text altitude expression.

    Examples:
        "FL100"      -> Altitude.from_flight_level(100)
        "2000ft AGL" -> Altitude.from_feet(2000, agl=True)
        "600 M AMSL" -> Altitude.from_meters(600)
        "GND"        -> Altitude.ground()
        "UNL"        -> Altitude.make_unlimited()

    Args:
        text: Altitude text, keywords and magnitude in any supported order

    Returns:
        Altitude object or None if parsing fails
    """
    if text is None:
        return None
    return _AltitudeParser(text).run()


def ft2m(feet: float) -> float:
    """Convert feet to meters."""
    return feet * FEET_TO_METERS


def m2ft(meters: float) -> float:
    """Convert meters to feet."""
    return meters * METERS_TO_FEET


def nm2m(nm: float) -> float:
    """Convert nautical miles to meters."""
    return nm * NAUTICAL_MILES_TO_METERS


def m2nm(meters: float) -> float:
    """Convert meters to nautical miles."""
    return meters * METERS_TO_NAUTICAL_MILES
