"""OpenAIP XML reader for airspaces, airports and navaids.

Expected layout (data format 1.1)::

    <OPENAIP DATAFORMAT="1.1">
      <AIRSPACES><ASP CATEGORY="CTR">...</ASP></AIRSPACES>
      <WAYPOINTS><AIRPORT TYPE="AF_CIVIL">...</AIRPORT></WAYPOINTS>
      <NAVAIDS><NAVAID TYPE="VOR">...</NAVAID></NAVAIDS>
    </OPENAIP>
"""

import logging
import xml.etree.ElementTree as ET
from typing import Dict, Optional

from ..airspace import Airspace, AirspaceType
from ..util.frequencies import is_valid_airband_frequency, is_valid_ndb_frequency, is_valid_vor_frequency
from ..util.geometry import LatLon
from ..util.multimap import CategoryMultiMap
from ..util.units import FEET_TO_METERS, parse_altitude
from ..util.utils import safe_float, safe_int
from ..waypoint import Airfield, Waypoint, WaypointStyle

logger = logging.getLogger(__name__)

OPENAIP_CATEGORIES: Dict[str, AirspaceType] = {
    "A": AirspaceType.CLASS_A,
    "B": AirspaceType.CLASS_B,
    "C": AirspaceType.CLASS_C,
    "D": AirspaceType.CLASS_D,
    "E": AirspaceType.CLASS_E,
    "F": AirspaceType.CLASS_F,
    "G": AirspaceType.CLASS_G,
    "CTR": AirspaceType.CTR,
    "DANGER": AirspaceType.DANGER,
    "PROHIBITED": AirspaceType.PROHIBITED,
    "RESTRICTED": AirspaceType.RESTRICTED,
    "TMZ": AirspaceType.TMZ,
    "RMZ": AirspaceType.RMZ,
    "GLIDING": AirspaceType.GLIDING,
    "WAVE": AirspaceType.WAVE,
    "OTH": AirspaceType.OTHER,
    "TMA": AirspaceType.OTHER,
    "FIR": AirspaceType.OTHER,
    "UIR": AirspaceType.OTHER,
}

OPENAIP_UNITS = {"F": "FT", "FT": "FT", "M": "M"}
OPENAIP_REFERENCES = {"MSL": "MSL", "GND": "AGL"}

VOR_TYPES = ("VOR", "VOR-DME", "VORTAC", "DVOR", "DVOR-DME", "DVORTAC")


def _text(elem: Optional[ET.Element], path: str, default: str = "") -> str:
    if elem is None:
        return default
    found = elem.find(path)
    if found is None or found.text is None:
        return default
    return found.text.strip()


def altitude_text(limit: ET.Element) -> str:
    """Build the free-text form of an ALTLIMIT element."""
    reference = limit.get("REFERENCE", "MSL").upper()
    alt = limit.find("ALT")
    if alt is None or alt.text is None:
        return ""
    unit = alt.get("UNIT", "F").upper()
    value = alt.text.strip()
    if unit == "FL" or reference == "STD":
        return "FL" + value
    return "%s %s %s" % (value, OPENAIP_UNITS.get(unit, unit), OPENAIP_REFERENCES.get(reference, reference))


def parse_polygon(text: str):
    """Parse 'lon lat, lon lat, ...' into LatLon points."""
    points = []
    for pair in text.split(","):
        values = pair.split()
        if len(values) < 2:
            continue
        lon, lat = safe_float(values[0]), safe_float(values[1])
        if lon is None or lat is None:
            return None
        points.append(LatLon(lat, lon))
    return points


def _load(path: str) -> Optional[ET.Element]:
    logger.info("Reading %s", path)
    try:
        return ET.parse(path).getroot()
    except OSError as e:
        logger.error("Unable to open OpenAIP file %s: %s", path, e)
    except ET.ParseError as e:
        logger.error("Invalid OpenAIP file %s: %s", path, e)
    return None


def read_airspaces(path: str, airspaces: CategoryMultiMap) -> Optional[int]:
    """Read the AIRSPACES section, returns the number of airspaces read."""
    root = _load(path)
    if root is None:
        return None
    count = 0
    for asp in root.iter("ASP"):
        category = asp.get("CATEGORY", "").upper()
        airspace = Airspace(type=OPENAIP_CATEGORIES.get(category, AirspaceType.UNKNOWN),
                            name=_text(asp, "NAME"))
        if category not in OPENAIP_CATEGORIES:
            logger.warning("Unknown OpenAIP airspace category '%s' for %s", category, airspace.name)
        top, bottom = asp.find("ALTLIMIT_TOP"), asp.find("ALTLIMIT_BOTTOM")
        if top is None or bottom is None:
            logger.warning("Skipping airspace without vertical limits: %s", airspace.name)
            continue
        airspace.top = parse_altitude(altitude_text(top))
        airspace.base = parse_altitude(altitude_text(bottom))
        if not airspace.has_limits():
            logger.warning("Skipping airspace with invalid vertical limits: %s", airspace.name)
            continue
        points = parse_polygon(_text(asp, "GEOMETRY/POLYGON"))
        if not points:
            logger.warning("Skipping airspace with invalid polygon: %s", airspace.name)
            continue
        for pos in points:
            airspace.add_point(pos)
        if not airspace.close_polygon():
            logger.warning("Skipping airspace with too few points: %s", airspace.name)
            continue
        airspaces.add(airspace.type, airspace)
        count += 1
    return count


def _position(elem: ET.Element):
    lat = safe_float(_text(elem, "GEOLOCATION/LAT"))
    lon = safe_float(_text(elem, "GEOLOCATION/LON"))
    if lat is None or lon is None or not LatLon(lat, lon).is_valid():
        return None
    elev = elem.find("GEOLOCATION/ELEV")
    alt = safe_float(elev.text if elev is not None else None, 0.0)
    if elev is not None and elev.get("UNIT", "M").upper() in ("F", "FT"):
        alt *= FEET_TO_METERS
    return lat, lon, alt


def _short_name(name: str, code: str) -> str:
    return code or name.replace(" ", "")[:6].upper()


def parse_airport(apt: ET.Element) -> Optional[Airfield]:
    name = _text(apt, "NAME")
    position = _position(apt)
    if position is None:
        logger.warning("Skipping airport with invalid position: %s", name)
        return None
    lat, lon, alt = position
    kind = apt.get("TYPE", "").upper()

    frequency = ""
    for radio in apt.findall("RADIO"):
        freq = _text(radio, "FREQUENCY")
        if is_valid_airband_frequency(freq):
            frequency = freq
            break
        logger.warning("Invalid airband frequency '%s' for %s", freq, name)

    runway_dir, runway_len, surface = 0, 0, ""
    runways = apt.findall("RWY")
    active = [r for r in runways if r.get("OPERATIONS", "ACTIVE").upper() == "ACTIVE"] or runways
    if active:
        rwy = active[0]
        surface = _text(rwy, "SFC").upper()
        runway_len = safe_int(_text(rwy, "LENGTH"), 0)
        direction = rwy.find("DIRECTION")
        if direction is not None:
            runway_dir = safe_int(direction.get("TC"), 0)

    if kind == "GLIDING":
        style = WaypointStyle.GLIDING_AIRFIELD
    elif kind == "AD_CLOSED":
        style = WaypointStyle.OUTLANDING
    elif surface in ("GRAS", "GRASS", "GRVL", "SAND", "UNKN"):
        style = WaypointStyle.AIRFIELD_GRASS
    else:
        style = WaypointStyle.AIRFIELD_SOLID

    return Airfield(name=name,
                    code=_short_name(name, _text(apt, "ICAO")),
                    country=_text(apt, "COUNTRY"),
                    lat=lat, lon=lon, elevation=alt,
                    style=style,
                    description=kind,
                    runway_dir=runway_dir,
                    runway_length=runway_len,
                    frequency=frequency)


def parse_navaid(nav: ET.Element) -> Optional[Waypoint]:
    name = _text(nav, "NAME")
    position = _position(nav)
    if position is None:
        logger.warning("Skipping navaid with invalid position: %s", name)
        return None
    lat, lon, alt = position
    kind = nav.get("TYPE", "").upper()
    freq = _text(nav, "RADIO/FREQUENCY")

    if kind == "NDB":
        style, valid, unit = WaypointStyle.NDB, is_valid_ndb_frequency(freq), "kHz"
    else:
        style, valid, unit = WaypointStyle.VOR, kind not in VOR_TYPES or is_valid_vor_frequency(freq), "MHz"
    if not valid:
        logger.warning("Invalid %s frequency '%s' for %s", kind, freq, name)
    description = "%s %s %s" % (kind, freq, unit) if freq and valid else kind

    return Waypoint(name=name,
                    code=_short_name(name, _text(nav, "ID")),
                    country=_text(nav, "COUNTRY"),
                    lat=lat, lon=lon, elevation=alt,
                    style=style,
                    description=description)


def read_waypoints(path: str, waypoints: CategoryMultiMap) -> Optional[int]:
    """Read airports and navaids, returns the number of waypoints read."""
    root = _load(path)
    if root is None:
        return None
    count = 0
    for elem in root.iter():
        if elem.tag == "AIRPORT":
            wpt = parse_airport(elem)
        elif elem.tag == "NAVAID":
            wpt = parse_navaid(elem)
        else:
            continue
        if wpt is not None:
            waypoints.add(wpt.style, wpt)
            count += 1
    return count
