"""Geometry utility functions for airspace boundaries.

Provides coordinate conversion between decimal degrees and DegMinSec,
geographic limits used for filtering, and the boundary elements (points,
arcs, circles) airspace definitions are made of, including their expansion
into polylines for formats without native arc support.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple
import logging

from shapely.geometry import Polygon, box

logger = logging.getLogger(__name__)


# Constants
PI2 = math.pi * 2
DEG2RAD = PI2 / 360.0
RAD_EARTH = 6371000.0  # Earth radius in meters
NM_TO_METERS = 1852.0

CIRCLE_APPROX_POINTS = 64  # Points approximating a full circle
ARC_STEP_DEG = 360.0 / CIRCLE_APPROX_POINTS


@dataclass(frozen=True)
class LatLon:
    """A geographic position in decimal degrees."""
    lat: float
    lon: float

    def is_valid(self) -> bool:
        return -90 <= self.lat <= 90 and -180 <= self.lon <= 180

    def destination(self, bearing_deg: float, distance_nm: float) -> 'LatLon':
        """Point reached from here along a great circle."""
        lat = self.lat * DEG2RAD
        lon = self.lon * DEG2RAD
        brng = bearing_deg * DEG2RAD
        d = distance_nm * NM_TO_METERS / RAD_EARTH  # angular distance
        lat2 = math.asin(math.sin(lat) * math.cos(d) +
                         math.cos(lat) * math.sin(d) * math.cos(brng))
        lon2 = lon + math.atan2(math.sin(brng) * math.sin(d) * math.cos(lat),
                                math.cos(d) - math.sin(lat) * math.sin(lat2))
        lon2 = (lon2 + math.pi) % PI2 - math.pi
        return LatLon(lat2 / DEG2RAD, lon2 / DEG2RAD)

    def bearing_to(self, other: 'LatLon') -> float:
        """Initial great circle bearing in degrees [0, 360)."""
        lat1 = self.lat * DEG2RAD
        lat2 = other.lat * DEG2RAD
        dlon = (other.lon - self.lon) * DEG2RAD
        y = math.sin(dlon) * math.cos(lat2)
        x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)
        return (math.atan2(y, x) / DEG2RAD + 360.0) % 360.0

    def distance_nm(self, other: 'LatLon') -> float:
        """Haversine distance in nautical miles."""
        lat1, lat2 = self.lat * DEG2RAD, other.lat * DEG2RAD
        dlat = lat2 - lat1
        dlon = (other.lon - self.lon) * DEG2RAD
        a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
        return RAD_EARTH * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a)) / NM_TO_METERS


@dataclass(frozen=True)
class Limits:
    """Geographic bounding box used to filter airspaces and waypoints.

    A box with left_lon > right_lon crosses the antimeridian.

    Example:
        limits = Limits(48.0, 44.0, 6.0, 14.0)
        limits.is_position_within(LatLon(45.5, 9.2))  # True
    """
    top_lat: float = 90.0
    bottom_lat: float = -90.0
    left_lon: float = -180.0
    right_lon: float = 180.0

    @property
    def is_unbounded(self) -> bool:
        """The whole world: no filtering requested."""
        return (self.top_lat == 90 and self.bottom_lat == -90
                and self.left_lon == -180 and self.right_lon == 180)

    def is_valid(self) -> bool:
        if not (-90 <= self.bottom_lat < self.top_lat <= 90):
            return False
        if not (-180 <= self.left_lon <= 180 and -180 <= self.right_lon <= 180):
            return False
        return self.left_lon != self.right_lon

    @property
    def crosses_antimeridian(self) -> bool:
        return self.left_lon > self.right_lon

    def is_position_within(self, pos: LatLon) -> bool:
        if not self.bottom_lat <= pos.lat <= self.top_lat:
            return False
        if self.crosses_antimeridian:
            return pos.lon >= self.left_lon or pos.lon <= self.right_lon
        return self.left_lon <= pos.lon <= self.right_lon

    def boxes(self) -> list:
        """Shapely boxes (x=lon, y=lat) covering the limits."""
        if self.crosses_antimeridian:
            return [box(self.left_lon, self.bottom_lat, 180.0, self.top_lat),
                    box(-180.0, self.bottom_lat, self.right_lon, self.top_lat)]
        return [box(self.left_lon, self.bottom_lat, self.right_lon, self.top_lat)]

    def intersects(self, points: List[LatLon]) -> bool:
        """True if the shape described by points overlaps the limits at all."""
        if not points:
            return False
        if any(self.is_position_within(p) for p in points):
            return True
        if len(points) < 3:
            return False
        shape = Polygon([(p.lon, p.lat) for p in points])
        if not shape.is_valid:
            logger.debug("Repairing invalid boundary polygon with %i points", len(points))
            shape = shape.buffer(0)
        return any(b.intersects(shape) for b in self.boxes())


@dataclass(frozen=True)
class Point:
    """A single boundary vertex."""
    pos: LatLon

    def discretize(self) -> List[LatLon]:
        return [self.pos]


@dataclass(frozen=True)
class Arc:
    """An arc of circle around center, from start to end bearing.

    Bearings are true degrees measured at the center. The arc runs
    clockwise unless clockwise is False.
    """
    center: LatLon
    radius_nm: float
    start_bearing: float
    end_bearing: float
    clockwise: bool = True
    start: Optional[LatLon] = None
    end: Optional[LatLon] = None

    @classmethod
    def from_points(cls, center: LatLon, start: LatLon, end: LatLon, clockwise: bool = True) -> 'Arc':
        """Arc defined by its end points (OpenAir DB), radius from the start point."""
        return cls(center=center,
                   radius_nm=center.distance_nm(start),
                   start_bearing=center.bearing_to(start),
                   end_bearing=center.bearing_to(end),
                   clockwise=clockwise,
                   start=start,
                   end=end)

    @property
    def sweep(self) -> float:
        """Swept angle in degrees, always positive."""
        if self.clockwise:
            sweep = (self.end_bearing - self.start_bearing) % 360.0
        else:
            sweep = (self.start_bearing - self.end_bearing) % 360.0
        return sweep or 360.0

    def discretize(self) -> List[LatLon]:
        """Expand into points at a fixed angular step, end points included."""
        direction = 1.0 if self.clockwise else -1.0
        steps = max(1, int(math.ceil(self.sweep / ARC_STEP_DEG)))
        step = self.sweep / steps
        points = []
        for i in range(steps + 1):
            bearing = self.start_bearing + direction * i * step
            points.append(self.center.destination(bearing, self.radius_nm))
        if self.start is not None:
            points[0] = self.start
        if self.end is not None:
            points[-1] = self.end
        return points


@dataclass(frozen=True)
class Circle:
    """A full circle around center."""
    center: LatLon
    radius_nm: float

    def discretize(self) -> List[LatLon]:
        circle = [self.center.destination(i * ARC_STEP_DEG, self.radius_nm)
                  for i in range(CIRCLE_APPROX_POINTS)]
        circle.append(circle[0])
        return circle


def decimal_to_dms(value: float) -> Tuple[int, int, int]:
    """Split absolute decimal degrees into rounded (deg, min, sec)."""
    total = int(round(abs(value) * 3600))
    return total // 3600, (total % 3600) // 60, total % 60


def decimal_to_dm(value: float) -> Tuple[int, float]:
    """Split absolute decimal degrees into (deg, decimal minutes)."""
    total = round(abs(value) * 60, 3)
    deg = int(total // 60)
    return deg, total - deg * 60


def dms_to_decimal(deg: float, minutes: float = 0.0, seconds: float = 0.0, hemisphere: str = "N") -> float:
    """Combine DegMinSec and hemisphere letter into signed decimal degrees."""
    value = abs(deg) + minutes / 60.0 + seconds / 3600.0
    if hemisphere.upper() in ("S", "W"):
        value = -value
    return value
