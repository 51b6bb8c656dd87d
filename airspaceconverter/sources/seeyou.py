"""SeeYou CUP waypoint reader."""

import csv
import logging
import re
from typing import Dict, List, Optional

from ..util.multimap import CategoryMultiMap
from ..util.units import FEET_TO_METERS, NAUTICAL_MILES_TO_METERS
from ..util.utils import decode_text, safe_float, safe_int
from ..waypoint import AIRFIELD_STYLES, Airfield, Waypoint, WaypointStyle

logger = logging.getLogger(__name__)

CUP_COLUMNS = ["name", "code", "country", "lat", "lon", "elev", "style", "rwdir", "rwlen", "freq", "desc"]
TASKS_SECTION = "-----Related Tasks-----"

STATUTE_MILES_TO_METERS = 1609.344

re_lat = re.compile(r"^(?P<deg>\d{2})(?P<min>\d{2}\.\d+)(?P<hem>[NS])$", re.IGNORECASE)
re_lon = re.compile(r"^(?P<deg>\d{3})(?P<min>\d{2}\.\d+)(?P<hem>[EW])$", re.IGNORECASE)
re_length = re.compile(r"^(?P<value>-?[\d.]+)\s*(?P<unit>m|ft|nm|ml)?$", re.IGNORECASE)

LENGTH_UNITS = {
    "m": 1.0,
    "ft": FEET_TO_METERS,
    "nm": NAUTICAL_MILES_TO_METERS,
    "ml": STATUTE_MILES_TO_METERS,
}


def parse_latitude(text: str) -> Optional[float]:
    m = re_lat.match(text.strip())
    if not m:
        return None
    value = int(m.group('deg')) + float(m.group('min')) / 60.0
    if value > 90:
        return None
    return -value if m.group('hem').upper() == 'S' else value


def parse_longitude(text: str) -> Optional[float]:
    m = re_lon.match(text.strip())
    if not m:
        return None
    value = int(m.group('deg')) + float(m.group('min')) / 60.0
    if value > 180:
        return None
    return -value if m.group('hem').upper() == 'W' else value


def parse_length(text: str) -> Optional[float]:
    """Parse a length with optional unit (m, ft, nm, ml) into meters."""
    text = text.strip()
    if not text:
        return 0.0
    m = re_length.match(text)
    if not m:
        return None
    value = safe_float(m.group('value'))
    if value is None:
        return None
    return value * LENGTH_UNITS[(m.group('unit') or "m").lower()]


def parse_row(row: Dict[str, str]) -> Optional[Waypoint]:
    name = row.get("name", "").strip()
    lat = parse_latitude(row.get("lat", ""))
    lon = parse_longitude(row.get("lon", ""))
    if lat is None or lon is None:
        logger.warning("Skipping waypoint with invalid position: %s", name)
        return None
    elevation = parse_length(row.get("elev", ""))
    if elevation is None:
        logger.warning("Invalid elevation '%s' for %s", row.get("elev"), name)
        elevation = 0.0
    style_code = safe_int(row.get("style", ""), 0)
    try:
        style = WaypointStyle(style_code)
    except ValueError:
        logger.warning("Unknown waypoint style %s for %s", style_code, name)
        style = WaypointStyle.UNKNOWN
    common = dict(name=name,
                  code=row.get("code", "").strip(),
                  country=row.get("country", "").strip(),
                  lat=lat, lon=lon, elevation=elevation,
                  style=style,
                  description=row.get("desc", "").strip())
    if style not in AIRFIELD_STYLES:
        return Waypoint(**common)
    runway_length = parse_length(row.get("rwlen", ""))
    if runway_length is None:
        logger.warning("Invalid runway length '%s' for %s", row.get("rwlen"), name)
        runway_length = 0
    return Airfield(runway_dir=safe_int(row.get("rwdir", ""), 0),
                    runway_length=int(round(runway_length)),
                    frequency=row.get("freq", "").strip(),
                    **common)


def _rows(lines: List[str]):
    """Yield rows as column dicts, honouring a header line when present."""
    columns = CUP_COLUMNS
    for i, row in enumerate(csv.reader(lines)):
        if not row:
            continue
        if i == 0 and row[0].strip().lower() == "name":
            columns = [c.strip().lower() for c in row]
            continue
        yield dict(zip(columns, row))


def read(path: str, waypoints: CategoryMultiMap) -> Optional[int]:
    """Read a CUP file into waypoints, returns the number read."""
    logger.info("Reading %s", path)
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        logger.error("Unable to open SeeYou file %s: %s", path, e)
        return None
    if not data:
        logger.error("Empty SeeYou file: %s", path)
        return None
    lines = []
    for line in decode_text(data).splitlines():
        if line.strip() == TASKS_SECTION:
            break
        if line.startswith("*") or not line.strip():
            continue
        lines.append(line)
    count = 0
    for row in _rows(lines):
        wpt = parse_row(row)
        if wpt is not None:
            waypoints.add(wpt.style, wpt)
            count += 1
    return count
