"""Google Earth KML/KMZ airspace reader.

Each Placemark with a Polygon (or, optionally, a LineString) becomes one
airspace. The category is taken from the "Category" ExtendedData value or,
failing that, from the name of the enclosing Folder. Vertical limits come
from the "Base"/"Top" ExtendedData values when present, otherwise from the
lowest and highest coordinate altitude, read as meters AMSL.
"""

import logging
import xml.etree.ElementTree as ET
import zipfile
from typing import List, Optional, Tuple

from ..airspace import CATEGORY_LABELS, Airspace, AirspaceType
from ..util.geometry import LatLon
from ..util.multimap import CategoryMultiMap
from ..util.units import Altitude, parse_altitude
from ..util.utils import safe_float

logger = logging.getLogger(__name__)

LABEL_TYPES = {label.upper(): kind for kind, label in CATEGORY_LABELS.items()}
LABEL_TYPES.update({kind.name: kind for kind in AirspaceType})


def _local(tag: str) -> str:
    """Tag name without its namespace."""
    return tag.rsplit("}", 1)[-1]


def _child(elem: ET.Element, name: str) -> Optional[ET.Element]:
    for child in elem:
        if _local(child.tag) == name:
            return child
    return None


def _descendants(elem: ET.Element, name: str):
    return [e for e in elem.iter() if _local(e.tag) == name]


def _child_text(elem: ET.Element, name: str) -> str:
    child = _child(elem, name)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def category_from_text(text: str) -> Optional[AirspaceType]:
    return LABEL_TYPES.get(text.strip().upper())


def parse_coordinates(text: str) -> List[Tuple[float, float, float]]:
    """Parse a KML coordinates element: 'lon,lat[,alt] lon,lat[,alt] ...'."""
    result = []
    for chunk in text.split():
        values = [safe_float(v) for v in chunk.split(",")]
        if len(values) < 2 or None in values:
            raise ValueError("Invalid KML coordinate: %s" % chunk)
        alt = values[2] if len(values) > 2 else 0.0
        result.append((values[0], values[1], alt))
    return result


def _extended_data(placemark: ET.Element) -> dict:
    data = {}
    for item in _descendants(placemark, "Data"):
        name = item.get("name")
        if name:
            data[name] = _child_text(item, "value")
    return data


class KMLReader:
    """Reads airspaces from a parsed KML document."""

    def __init__(self, airspaces: CategoryMultiMap, process_line_strings: bool = False):
        self.airspaces = airspaces
        self.process_line_strings = process_line_strings
        self.count = 0

    def read_root(self, root: ET.Element) -> int:
        self._walk(root, None)
        return self.count

    def _walk(self, elem: ET.Element, folder_type: Optional[AirspaceType]) -> None:
        for child in elem:
            tag = _local(child.tag)
            if tag == "Folder":
                kind = category_from_text(_child_text(child, "name"))
                self._walk(child, kind if kind is not None else folder_type)
            elif tag == "Document":
                self._walk(child, folder_type)
            elif tag == "Placemark":
                self.read_placemark(child, folder_type)

    def _boundary(self, placemark: ET.Element) -> Optional[List[Tuple[float, float, float]]]:
        for polygon in _descendants(placemark, "Polygon"):
            for outer in _descendants(polygon, "outerBoundaryIs"):
                coords = _descendants(outer, "coordinates")
                if coords and coords[0].text:
                    return parse_coordinates(coords[0].text)
        if self.process_line_strings:
            for line in _descendants(placemark, "LineString"):
                coords = _descendants(line, "coordinates")
                if coords and coords[0].text:
                    return parse_coordinates(coords[0].text)
        return None

    def read_placemark(self, placemark: ET.Element, folder_type: Optional[AirspaceType]) -> None:
        name = _child_text(placemark, "name")
        try:
            coords = self._boundary(placemark)
        except ValueError as e:
            logger.warning("Skipping placemark %s: %s", name, e)
            return
        if not coords:
            logger.debug("Placemark %s has no boundary", name)
            return
        data = _extended_data(placemark)
        kind = category_from_text(data.get("Category", ""))
        if kind is None:
            kind = folder_type if folder_type is not None else AirspaceType.UNKNOWN

        airspace = Airspace(type=kind, name=name)
        if "Base" in data and "Top" in data:
            airspace.base = parse_altitude(data["Base"])
            airspace.top = parse_altitude(data["Top"])
        else:
            alts = [c[2] for c in coords]
            airspace.base = Altitude.from_meters(min(alts))
            airspace.top = Altitude.from_meters(max(alts))
        if not airspace.has_limits():
            logger.warning("Skipping airspace with invalid vertical limits: %s", name)
            return
        for lon, lat, _ in coords:
            pos = LatLon(lat, lon)
            if not pos.is_valid():
                logger.warning("Skipping airspace with invalid position: %s", name)
                return
            airspace.add_point(pos)
        if not airspace.close_polygon():
            logger.warning("Skipping airspace with too few points: %s", name)
            return
        self.airspaces.add(airspace.type, airspace)
        self.count += 1


def read_kml_bytes(data: bytes, airspaces: CategoryMultiMap, process_line_strings: bool = False) -> int:
    root = ET.fromstring(data)
    return KMLReader(airspaces, process_line_strings).read_root(root)


def read_kml(path: str, airspaces: CategoryMultiMap, process_line_strings: bool = False) -> Optional[int]:
    """Read a .kml file, returns the number of airspaces read."""
    logger.info("Reading %s", path)
    try:
        with open(path, "rb") as f:
            return read_kml_bytes(f.read(), airspaces, process_line_strings)
    except OSError as e:
        logger.error("Unable to open KML file %s: %s", path, e)
    except ET.ParseError as e:
        logger.error("Invalid KML file %s: %s", path, e)
    return None


def read_kmz(path: str, airspaces: CategoryMultiMap, process_line_strings: bool = False) -> Optional[int]:
    """Read the first .kml document inside a .kmz archive."""
    logger.info("Reading %s", path)
    try:
        with zipfile.ZipFile(path) as kmz:
            names = [n for n in kmz.namelist() if n.lower().endswith(".kml")]
            if not names:
                logger.error("No KML document found in %s", path)
                return None
            return read_kml_bytes(kmz.read(names[0]), airspaces, process_line_strings)
    except (OSError, zipfile.BadZipFile) as e:
        logger.error("Unable to open KMZ file %s: %s", path, e)
    except ET.ParseError as e:
        logger.error("Invalid KML in %s: %s", path, e)
    return None
