"""
Google Earth KMZ writer.

Airspaces are drawn as 3D volumes (floor, ceiling and side walls) with
absolute altitudes, grouped in one folder per category. AGL altitudes are
resolved against the loaded terrain maps, falling back to the default
terrain altitude where no map covers the point. Waypoints follow in one
folder per style.
"""
import logging
import os
from typing import Dict, List, Tuple

import simplekml

from ..airspace import Airspace, AirspaceType
from ..util.geometry import LatLon
from ..util.multimap import CategoryMultiMap
from ..util.terrain import TerrainMaps
from ..util.units import QNE, Altitude
from ..util.utils import header_lines
from ..waypoint import Waypoint, WaypointStyle

logger = logging.getLogger(__name__)

UNLIMITED_TOP_METERS = 30000.0

CATEGORY_COLORS: Dict[AirspaceType, Tuple[int, int, int]] = {
    AirspaceType.CLASS_A: (255, 0, 0),
    AirspaceType.CLASS_B: (255, 85, 0),
    AirspaceType.CLASS_C: (255, 170, 0),
    AirspaceType.CLASS_D: (0, 0, 255),
    AirspaceType.CLASS_E: (0, 170, 0),
    AirspaceType.CLASS_F: (0, 170, 170),
    AirspaceType.CLASS_G: (170, 170, 170),
    AirspaceType.DANGER: (255, 0, 170),
    AirspaceType.PROHIBITED: (128, 0, 0),
    AirspaceType.RESTRICTED: (200, 0, 0),
    AirspaceType.CTR: (130, 0, 255),
    AirspaceType.TMZ: (80, 80, 80),
    AirspaceType.RMZ: (0, 90, 160),
    AirspaceType.GLIDING: (255, 255, 0),
    AirspaceType.WAVE: (0, 255, 255),
    AirspaceType.NOTAM: (255, 255, 255),
    AirspaceType.OTHER: (120, 120, 120),
    AirspaceType.UNKNOWN: (60, 60, 60),
}

Coordinates = List[Tuple[float, float, float]]


def _style_label(style: WaypointStyle) -> str:
    return style.name.replace("_", " ").capitalize()


def waypoint_description(wpt: Waypoint) -> str:
    lines = ["Code: " + wpt.code,
             "Country: " + wpt.country,
             "Elevation: %.0f m" % wpt.elevation]
    if wpt.is_airfield:
        if wpt.runway_length:
            lines.append("Runway: %03d, %d m" % (wpt.runway_dir, wpt.runway_length))
        if wpt.frequency:
            lines.append("Frequency: %s MHz" % wpt.frequency)
    if wpt.description:
        lines.append(wpt.description)
    return "\n".join(lines)


class KMLWriter:
    """Builds a KMZ document from the airspace and waypoint collections.

    After write() the all_agl_altitudes_covered flag tells whether every
    AGL point was resolved with a terrain map rather than the default
    terrain altitude.
    """

    def __init__(self, terrain: TerrainMaps, qnh: float = QNE):
        self.terrain = terrain
        self.qnh = qnh
        self.all_agl_altitudes_covered = True

    def altitude_at(self, alt: Altitude, pos: LatLon) -> float:
        """Altitude in meters AMSL at the given position."""
        terrain_meters = 0.0
        if alt.is_agl:
            elevation = self.terrain.elevation(pos.lat, pos.lon)
            if elevation is None:
                self.all_agl_altitudes_covered = False
                elevation = self.terrain.default_terrain_altitude
            terrain_meters = elevation
        return alt.to_amsl_meters(terrain_meters, self.qnh, UNLIMITED_TOP_METERS)

    def ring(self, points: List[LatLon], alt: Altitude) -> Coordinates:
        return [(p.lon, p.lat, self.altitude_at(alt, p)) for p in points]

    def add_airspace(self, folder, airspace: Airspace) -> None:
        floor = self.ring(airspace.points, airspace.base)
        ceiling = self.ring(airspace.points, airspace.top)
        volume = folder.newmultigeometry(name=airspace.name)
        volume.description = str(airspace)
        for outline in (floor, ceiling):
            polygon = volume.newpolygon(outerboundaryis=outline)
            polygon.altitudemode = simplekml.AltitudeMode.absolute
        for i in range(len(floor) - 1):
            wall = volume.newpolygon(outerboundaryis=[floor[i], floor[i + 1], ceiling[i + 1], ceiling[i], floor[i]])
            wall.altitudemode = simplekml.AltitudeMode.absolute
        volume.extendeddata.newdata(name="Category", value=airspace.type.label)
        volume.extendeddata.newdata(name="Base", value=str(airspace.base))
        volume.extendeddata.newdata(name="Top", value=str(airspace.top))
        if airspace.frequency:
            volume.extendeddata.newdata(name="Frequency", value=airspace.frequency)
        r, g, b = CATEGORY_COLORS[airspace.type]
        volume.style.polystyle.color = simplekml.Color.rgb(r, g, b, 100)
        volume.style.linestyle.color = simplekml.Color.rgb(r, g, b)

    def add_waypoint(self, folder, wpt: Waypoint) -> None:
        point = folder.newpoint(name=wpt.name,
                                description=waypoint_description(wpt),
                                coords=[(wpt.lon, wpt.lat, wpt.elevation)])
        point.altitudemode = simplekml.AltitudeMode.absolute

    def build(self, name: str, airspaces: CategoryMultiMap, waypoints: CategoryMultiMap) -> simplekml.Kml:
        self.all_agl_altitudes_covered = True
        kml = simplekml.Kml()
        kml.document.name = name
        kml.document.description = "\n".join(header_lines())
        for kind in airspaces.keys():
            folder = kml.newfolder(name=kind.label)
            for airspace in airspaces.get(kind):
                if not airspace.has_limits() or not airspace.is_closed:
                    logger.warning("Skipping incomplete airspace: %s", airspace.name)
                    continue
                self.add_airspace(folder, airspace)
        for style in waypoints.keys():
            folder = kml.newfolder(name=_style_label(style))
            for wpt in waypoints.get(style):
                self.add_waypoint(folder, wpt)
        return kml

    def write(self, path: str, airspaces: CategoryMultiMap, waypoints: CategoryMultiMap) -> bool:
        name = os.path.splitext(os.path.basename(path))[0]
        kml = self.build(name, airspaces, waypoints)
        try:
            kml.savekmz(path)
        except OSError as e:
            logger.error("Unable to write KMZ file %s: %s", path, e)
            return False
        logger.info("Written %i airspace(s) and %i waypoint(s) to %s", len(airspaces), len(waypoints), path)
        return True
