"""SeeYou CUP waypoint writer."""

import csv
import logging

from ..util.geometry import decimal_to_dm
from ..util.multimap import CategoryMultiMap
from ..util.utils import header_lines
from ..waypoint import Waypoint

logger = logging.getLogger(__name__)

CUP_HEADER = ["name", "code", "country", "lat", "lon", "elev", "style", "rwdir", "rwlen", "freq", "desc"]


def format_latitude(lat: float) -> str:
    deg, minutes = decimal_to_dm(lat)
    return "%02d%06.3f%s" % (deg, minutes, "N" if lat >= 0 else "S")


def format_longitude(lon: float) -> str:
    deg, minutes = decimal_to_dm(lon)
    return "%03d%06.3f%s" % (deg, minutes, "E" if lon >= 0 else "W")


def waypoint_row(wpt: Waypoint) -> list:
    row = [wpt.name,
           wpt.code,
           wpt.country,
           format_latitude(wpt.lat),
           format_longitude(wpt.lon),
           "%.1fm" % wpt.elevation,
           int(wpt.style)]
    if wpt.is_airfield:
        row += ["%03d" % wpt.runway_dir if wpt.runway_dir else "",
                "%dm" % wpt.runway_length if wpt.runway_length else "",
                wpt.frequency]
    else:
        row += ["", "", ""]
    row.append(wpt.description)
    return row


def write(path: str, waypoints: CategoryMultiMap) -> bool:
    """Write waypoints to a CUP file, True on success."""
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            for line in header_lines("* "):
                f.write(line + "\r\n")
            writer = csv.writer(f, lineterminator="\r\n")
            writer.writerow(CUP_HEADER)
            for wpt in waypoints:
                writer.writerow(waypoint_row(wpt))
    except OSError as e:
        logger.error("Unable to write SeeYou file %s: %s", path, e)
        return False
    logger.info("Written %i waypoint(s) to %s", len(waypoints), path)
    return True
