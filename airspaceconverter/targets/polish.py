"""
Polish map format writer.

The Polish (.mp) file is the text input of the cGPSmapper compiler, which
turns it into a Garmin .img map. Each airspace becomes a [POLYGON] whose
label carries the name and vertical limits.
"""
import logging
from typing import Dict

from ..airspace import Airspace, AirspaceType
from ..util.multimap import CategoryMultiMap
from ..util.utils import header_lines

logger = logging.getLogger(__name__)

MAP_ID = 10000001

# Garmin polygon type codes
POLYGON_TYPES: Dict[AirspaceType, str] = {
    AirspaceType.CLASS_A: "0x01",
    AirspaceType.CLASS_B: "0x02",
    AirspaceType.CLASS_C: "0x03",
    AirspaceType.CLASS_D: "0x04",
    AirspaceType.CLASS_E: "0x05",
    AirspaceType.CLASS_F: "0x06",
    AirspaceType.CLASS_G: "0x07",
    AirspaceType.DANGER: "0x08",
    AirspaceType.PROHIBITED: "0x09",
    AirspaceType.RESTRICTED: "0x0a",
    AirspaceType.CTR: "0x0b",
    AirspaceType.TMZ: "0x0c",
    AirspaceType.RMZ: "0x0d",
    AirspaceType.GLIDING: "0x0e",
    AirspaceType.WAVE: "0x0f",
    AirspaceType.NOTAM: "0x10",
    AirspaceType.OTHER: "0x11",
    AirspaceType.UNKNOWN: "0x12",
}


def polygon_lines(airspace: Airspace):
    label = "%s %s %s-%s" % (airspace.type.label, airspace.name, airspace.base, airspace.top)
    points = ",".join("(%.6f,%.6f)" % (p.lat, p.lon) for p in airspace.points)
    return ["[POLYGON]",
            "Type=" + POLYGON_TYPES[airspace.type],
            "Label=" + label.replace("\n", " "),
            "Levels=3",
            "Data0=" + points,
            "[END]",
            ""]


def header(name: str):
    return ["[IMG ID]",
            "CodePage=1252",
            "LblCoding=9",
            "ID=%d" % MAP_ID,
            "Name=" + name,
            "TypeSet=Navigation",
            "Elevation=M",
            "Preprocess=F",
            "TreSize=511",
            "TreMargin=0.00000",
            "RgnLimit=127",
            "POIIndex=N",
            "Levels=4",
            "Level0=22",
            "Level1=21",
            "Level2=20",
            "Level3=19",
            "Zoom0=0",
            "Zoom1=1",
            "Zoom2=2",
            "Zoom3=3",
            "[END-IMG ID]",
            ""]


def write(path: str, airspaces: CategoryMultiMap) -> bool:
    """Write airspaces to a Polish file, True on success."""
    lines = header_lines("; ")
    lines += header("Airspace")
    written = 0
    for airspace in airspaces:
        if not airspace.is_closed:
            logger.warning("Skipping airspace with open boundary: %s", airspace.name)
            continue
        lines += polygon_lines(airspace)
        written += 1
    try:
        with open(path, "w", encoding="cp1252", errors="replace", newline="\r\n") as f:
            f.write("\n".join(lines))
    except OSError as e:
        logger.error("Unable to write Polish file %s: %s", path, e)
        return False
    logger.info("Written %i airspace(s) to %s", written, path)
    return True
