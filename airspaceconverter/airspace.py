"""Airspace entity: a named, categorized boundary with vertical limits."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Optional, Tuple, Union

from .util.geometry import Arc, Circle, LatLon, Limits, Point
from .util.units import Altitude

Geometry = Union[Point, Arc, Circle]


class AirspaceType(IntEnum):
    """Airspace category, also the sort key of the airspace collection."""
    CLASS_A = 0
    CLASS_B = 1
    CLASS_C = 2
    CLASS_D = 3
    CLASS_E = 4
    CLASS_F = 5
    CLASS_G = 6
    DANGER = 7
    PROHIBITED = 8
    RESTRICTED = 9
    CTR = 10
    TMZ = 11
    RMZ = 12
    GLIDING = 13
    WAVE = 14
    NOTAM = 15
    OTHER = 16
    UNKNOWN = 17

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_LABELS: Dict[AirspaceType, str] = {
    AirspaceType.CLASS_A: "Class A",
    AirspaceType.CLASS_B: "Class B",
    AirspaceType.CLASS_C: "Class C",
    AirspaceType.CLASS_D: "Class D",
    AirspaceType.CLASS_E: "Class E",
    AirspaceType.CLASS_F: "Class F",
    AirspaceType.CLASS_G: "Class G",
    AirspaceType.DANGER: "Danger",
    AirspaceType.PROHIBITED: "Prohibited",
    AirspaceType.RESTRICTED: "Restricted",
    AirspaceType.CTR: "CTR",
    AirspaceType.TMZ: "TMZ",
    AirspaceType.RMZ: "RMZ",
    AirspaceType.GLIDING: "Gliding sector",
    AirspaceType.WAVE: "Wave window",
    AirspaceType.NOTAM: "NOTAM",
    AirspaceType.OTHER: "Other",
    AirspaceType.UNKNOWN: "Unknown",
}


@dataclass
class Airspace:
    """An airspace with its boundary and vertical limits.

    The boundary is kept twice: as the ordered geometry elements read from
    the source (points, arcs, circles) and as the closed ring of points they
    expand to.
    """
    type: AirspaceType = AirspaceType.UNKNOWN
    name: str = ""
    base: Optional[Altitude] = None
    top: Optional[Altitude] = None
    frequency: str = ""
    station: str = ""
    geometries: List[Geometry] = field(default_factory=list)
    points: List[LatLon] = field(default_factory=list)

    def add_point(self, pos: LatLon) -> None:
        self.geometries.append(Point(pos))
        self.points.append(pos)

    def add_arc(self, arc: Arc) -> None:
        self.geometries.append(arc)
        self.points.extend(arc.discretize())

    def add_circle(self, circle: Circle) -> None:
        self.geometries.append(circle)
        self.points.extend(circle.discretize())

    def close_polygon(self) -> bool:
        """Close the point ring, False if there are too few points for a polygon."""
        if len(self.points) < 3:
            return False
        if self.points[0] != self.points[-1]:
            self.points.append(self.points[0])
        return len(self.points) >= 4

    @property
    def is_closed(self) -> bool:
        return len(self.points) >= 4 and self.points[0] == self.points[-1]

    def has_limits(self) -> bool:
        return self.base is not None and self.top is not None

    def is_within_limits(self, limits: Limits) -> bool:
        """Kept unless the whole extent lies outside the limits."""
        return limits.intersects(self.points)

    def bounds(self) -> Tuple[float, float, float, float]:
        """Returns (min_lat, min_lon, max_lat, max_lon)."""
        lats = [p.lat for p in self.points]
        lons = [p.lon for p in self.points]
        return (min(lats), min(lons), max(lats), max(lons))

    def __str__(self) -> str:
        return "%s %s [%s - %s]" % (self.type.label, self.name, self.base, self.top)
