"""OpenAir airspace reader."""

import logging
import re
from typing import Dict, List, Optional

from ..airspace import Airspace, AirspaceType
from ..util.geometry import Arc, Circle, LatLon, dms_to_decimal
from ..util.multimap import CategoryMultiMap
from ..util.units import parse_altitude
from ..util.utils import decode_text, safe_float

logger = logging.getLogger(__name__)

OPENAIR_TYPES: Dict[str, AirspaceType] = {
    "A": AirspaceType.CLASS_A,
    "B": AirspaceType.CLASS_B,
    "C": AirspaceType.CLASS_C,
    "D": AirspaceType.CLASS_D,
    "E": AirspaceType.CLASS_E,
    "F": AirspaceType.CLASS_F,
    "G": AirspaceType.CLASS_G,
    "Q": AirspaceType.DANGER,
    "DANGER": AirspaceType.DANGER,
    "P": AirspaceType.PROHIBITED,
    "PROHIBITED": AirspaceType.PROHIBITED,
    "GP": AirspaceType.PROHIBITED,
    "R": AirspaceType.RESTRICTED,
    "RESTRICTED": AirspaceType.RESTRICTED,
    "CTR": AirspaceType.CTR,
    "TMZ": AirspaceType.TMZ,
    "RMZ": AirspaceType.RMZ,
    "GSEC": AirspaceType.GLIDING,
    "W": AirspaceType.WAVE,
    "NOTAM": AirspaceType.NOTAM,
    "OTH": AirspaceType.OTHER,
    "UNKNOWN": AirspaceType.UNKNOWN,
}

# 45:30:00 N or 45:30.250N or 008:12:30.5 E
RE_HALF = r"(?P<{0}deg>\d{{1,3}}):(?P<{0}min>\d{{1,2}}(?:\.\d+)?)(?::(?P<{0}sec>\d{{1,2}}(?:\.\d+)?))?\s*(?P<{0}hem>[{1}])"
re_coord = re.compile(RE_HALF.format("lat", "NS") + r"\s*,?\s*" + RE_HALF.format("lon", "EW"), re.IGNORECASE)
re_var = re.compile(r"^(?P<name>[A-Z])\s*=\s*(?P<value>.*)$", re.IGNORECASE)


def parse_coordinate(text: str) -> Optional[LatLon]:
    """Parse an OpenAir coordinate pair in DMS or decimal-minute notation."""
    m = re_coord.search(text)
    if not m:
        return None
    lat = dms_to_decimal(float(m.group('latdeg')), float(m.group('latmin')),
                         float(m.group('latsec') or 0), m.group('lathem'))
    lon = dms_to_decimal(float(m.group('londeg')), float(m.group('lonmin')),
                         float(m.group('lonsec') or 0), m.group('lonhem'))
    pos = LatLon(lat, lon)
    return pos if pos.is_valid() else None


def parse_coordinates(text: str) -> List[LatLon]:
    """All coordinate pairs found in text, in order."""
    result = []
    for m in re_coord.finditer(text):
        pos = parse_coordinate(m.group(0))
        if pos is not None:
            result.append(pos)
    return result


class OpenAirReader:
    """Line based parser filling an airspace collection."""

    def __init__(self, airspaces: CategoryMultiMap):
        self.airspaces = airspaces
        self.current: Optional[Airspace] = None
        self.center: Optional[LatLon] = None
        self.clockwise = True
        self.count = 0
        self.line_number = 0

    def finalize(self) -> None:
        """Complete and sanity check the airspace being read."""
        airspace = self.current
        self.current = None
        self.center = None
        self.clockwise = True
        if airspace is None:
            return
        if not airspace.has_limits():
            logger.warning("Skipping airspace without vertical limits: %s (line %i)", airspace.name, self.line_number)
            return
        if not airspace.close_polygon():
            logger.warning("Skipping airspace with incomplete boundary: %s (line %i)", airspace.name, self.line_number)
            return
        self.airspaces.add(airspace.type, airspace)
        self.count += 1
        logger.debug("Read %s with %i points", airspace, len(airspace.points))

    def parse_line(self, line: str) -> None:
        line = line.strip()
        if not line or line.startswith("*"):
            return
        command, _, value = line.partition(" ")
        command = command.upper()
        value = value.split("*")[0].strip()

        if command == "AC":
            self.finalize()
            code = value.upper()
            if code not in OPENAIR_TYPES:
                logger.warning("Unknown airspace class '%s' at line %i", value, self.line_number)
            self.current = Airspace(type=OPENAIR_TYPES.get(code, AirspaceType.UNKNOWN))
            return
        if command in ("SP", "SB", "AT", "AY", "AI"):
            return
        if self.current is None:
            logger.warning("Ignoring line %i outside of an airspace: %s", self.line_number, line)
            return

        if command == "AN":
            self.current.name = value
        elif command in ("AL", "AH"):
            alt = parse_altitude(value)
            if alt is None:
                logger.warning("Invalid altitude '%s' at line %i", value, self.line_number)
            elif command == "AL":
                self.current.base = alt
            else:
                self.current.top = alt
        elif command == "AF":
            self.current.frequency = value
        elif command == "AG":
            self.current.station = value
        elif command == "V":
            self.parse_variable(value)
        elif command == "DP":
            pos = parse_coordinate(value)
            if pos is None:
                logger.warning("Invalid point '%s' at line %i", value, self.line_number)
            else:
                self.current.add_point(pos)
        elif command == "DA":
            self.parse_arc_angles(value)
        elif command == "DB":
            self.parse_arc_points(value)
        elif command == "DC":
            radius = safe_float(value)
            if radius is None or self.center is None:
                logger.warning("Invalid circle '%s' at line %i", value, self.line_number)
            else:
                self.current.add_circle(Circle(self.center, radius))
        elif command == "DY":
            logger.warning("Airways not supported, line %i skipped", self.line_number)
        else:
            logger.warning("Unknown OpenAir command '%s' at line %i", command, self.line_number)

    def parse_variable(self, value: str) -> None:
        m = re_var.match(value)
        if not m:
            logger.warning("Invalid variable '%s' at line %i", value, self.line_number)
            return
        name, content = m.group('name').upper(), m.group('value').strip()
        if name == "X":
            self.center = parse_coordinate(content)
            if self.center is None:
                logger.warning("Invalid center '%s' at line %i", content, self.line_number)
        elif name == "D":
            self.clockwise = not content.startswith("-")

    def parse_arc_angles(self, value: str) -> None:
        parts = [safe_float(p) for p in value.split(",")]
        if len(parts) != 3 or None in parts or self.center is None:
            logger.warning("Invalid arc '%s' at line %i", value, self.line_number)
            return
        radius, start, end = parts
        self.current.add_arc(Arc(self.center, radius, start % 360.0, end % 360.0, self.clockwise))

    def parse_arc_points(self, value: str) -> None:
        points = parse_coordinates(value)
        if len(points) != 2 or self.center is None:
            logger.warning("Invalid arc '%s' at line %i", value, self.line_number)
            return
        self.current.add_arc(Arc.from_points(self.center, points[0], points[1], self.clockwise))

    def read_text(self, text: str) -> int:
        for self.line_number, line in enumerate(text.splitlines(), 1):
            self.parse_line(line)
        self.finalize()
        return self.count


def read(path: str, airspaces: CategoryMultiMap) -> Optional[int]:
    """Read an OpenAir file into airspaces, returns the number read."""
    logger.info("Reading %s", path)
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        logger.error("Unable to open OpenAir file %s: %s", path, e)
        return None
    if not data:
        logger.error("Empty OpenAir file: %s", path)
        return None
    return OpenAirReader(airspaces).read_text(decode_text(data))
