"""
OpenAir output writer.

Writes airspaces keeping arcs and circles as native OpenAir records
(V X=, V D=, DA, DB, DC) unless arc calculation is disabled, in which
case every boundary vertex is written as a DP point.
"""
import logging
from typing import Dict, List

from ..airspace import Airspace, AirspaceType
from ..util.geometry import Arc, Circle, LatLon, decimal_to_dm, decimal_to_dms
from ..util.multimap import CategoryMultiMap
from ..util.utils import header_lines

logger = logging.getLogger(__name__)

OPENAIR_CLASSES: Dict[AirspaceType, str] = {
    AirspaceType.CLASS_A: "A",
    AirspaceType.CLASS_B: "B",
    AirspaceType.CLASS_C: "C",
    AirspaceType.CLASS_D: "D",
    AirspaceType.CLASS_E: "E",
    AirspaceType.CLASS_F: "F",
    AirspaceType.CLASS_G: "G",
    AirspaceType.DANGER: "Q",
    AirspaceType.PROHIBITED: "P",
    AirspaceType.RESTRICTED: "R",
    AirspaceType.CTR: "CTR",
    AirspaceType.TMZ: "TMZ",
    AirspaceType.RMZ: "RMZ",
    AirspaceType.GLIDING: "GSEC",
    AirspaceType.WAVE: "W",
    AirspaceType.NOTAM: "NOTAM",
    AirspaceType.OTHER: "OTH",
    AirspaceType.UNKNOWN: "UNKNOWN",
}


def format_coordinate(pos: LatLon, as_ddmmss: bool = False) -> str:
    """Render a position as 'DD:MM.mmm N DDD:MM.mmm E' or 'DD:MM:SS N DDD:MM:SS E'."""
    lat_hem = "N" if pos.lat >= 0 else "S"
    lon_hem = "E" if pos.lon >= 0 else "W"
    if as_ddmmss:
        lat_d, lat_m, lat_s = decimal_to_dms(pos.lat)
        lon_d, lon_m, lon_s = decimal_to_dms(pos.lon)
        return "%02d:%02d:%02d %s %03d:%02d:%02d %s" % (lat_d, lat_m, lat_s, lat_hem,
                                                       lon_d, lon_m, lon_s, lon_hem)
    lat_d, lat_m = decimal_to_dm(pos.lat)
    lon_d, lon_m = decimal_to_dm(pos.lon)
    return "%02d:%06.3f %s %03d:%06.3f %s" % (lat_d, lat_m, lat_hem, lon_d, lon_m, lon_hem)


def format_altitude(alt) -> str:
    if alt.unlimited:
        return "UNLIM"
    return str(alt)


def _format_number(value: float) -> str:
    return ("%.3f" % value).rstrip("0").rstrip(".")


class OpenAirWriter:
    """Serializes an airspace collection to OpenAir text."""

    def __init__(self, do_not_calculate_arcs: bool = False, write_coordinates_as_ddmmss: bool = False):
        self.do_not_calculate_arcs = do_not_calculate_arcs
        self.as_ddmmss = write_coordinates_as_ddmmss

    def coord(self, pos: LatLon) -> str:
        return format_coordinate(pos, self.as_ddmmss)

    def airspace_lines(self, airspace: Airspace) -> List[str]:
        lines = ["AC " + OPENAIR_CLASSES[airspace.type],
                 "AN " + airspace.name]
        if airspace.frequency:
            lines.append("AF " + airspace.frequency)
        if airspace.station:
            lines.append("AG " + airspace.station)
        lines.append("AL " + format_altitude(airspace.base))
        lines.append("AH " + format_altitude(airspace.top))

        if self.do_not_calculate_arcs:
            lines.extend("DP " + self.coord(p) for p in airspace.points)
            return lines

        clockwise = True
        for geometry in airspace.geometries:
            if isinstance(geometry, (Arc, Circle)):
                lines.append("V X=" + self.coord(geometry.center))
            if isinstance(geometry, Circle):
                lines.append("DC " + _format_number(geometry.radius_nm))
            elif isinstance(geometry, Arc):
                if geometry.clockwise != clockwise:
                    clockwise = geometry.clockwise
                    lines.append("V D=" + ("+" if clockwise else "-"))
                if geometry.start is not None and geometry.end is not None:
                    lines.append("DB %s, %s" % (self.coord(geometry.start), self.coord(geometry.end)))
                else:
                    lines.append("DA %s, %s, %s" % (_format_number(geometry.radius_nm),
                                                    _format_number(geometry.start_bearing),
                                                    _format_number(geometry.end_bearing)))
            else:
                lines.append("DP " + self.coord(geometry.pos))
        return lines

    def write(self, path: str, airspaces: CategoryMultiMap) -> bool:
        lines = header_lines("* ")
        written = 0
        for airspace in airspaces:
            if not airspace.has_limits():
                logger.warning("Skipping airspace without vertical limits: %s", airspace.name)
                continue
            lines.extend(self.airspace_lines(airspace))
            lines.append("")
            written += 1
        try:
            with open(path, "w", encoding="utf-8", newline="\r\n") as f:
                f.write("\n".join(lines))
                f.write("\n")
        except OSError as e:
            logger.error("Unable to write OpenAir file %s: %s", path, e)
            return False
        logger.info("Written %i airspace(s) to %s", written, path)
        return True


def write(path: str, airspaces: CategoryMultiMap, do_not_calculate_arcs: bool = False,
          write_coordinates_as_ddmmss: bool = False) -> bool:
    return OpenAirWriter(do_not_calculate_arcs, write_coordinates_as_ddmmss).write(path, airspaces)
