"""Waypoint and airfield entities."""

from dataclasses import dataclass
from enum import IntEnum

from .util.geometry import LatLon


class WaypointStyle(IntEnum):
    """SeeYou waypoint style, also the key of the waypoint collection."""
    UNKNOWN = 0
    NORMAL = 1
    AIRFIELD_GRASS = 2
    OUTLANDING = 3
    GLIDING_AIRFIELD = 4
    AIRFIELD_SOLID = 5
    MOUNTAIN_PASS = 6
    MOUNTAIN_TOP = 7
    TRANSMITTER_MAST = 8
    VOR = 9
    NDB = 10
    COOLING_TOWER = 11
    DAM = 12
    TUNNEL = 13
    BRIDGE = 14
    POWER_PLANT = 15
    CASTLE = 16
    INTERSECTION = 17

    @property
    def is_airfield(self) -> bool:
        return self in AIRFIELD_STYLES


AIRFIELD_STYLES = frozenset([
    WaypointStyle.AIRFIELD_GRASS,
    WaypointStyle.OUTLANDING,
    WaypointStyle.GLIDING_AIRFIELD,
    WaypointStyle.AIRFIELD_SOLID,
])


@dataclass
class Waypoint:
    name: str
    code: str
    country: str
    lat: float
    lon: float
    elevation: float = 0.0  # [m]
    style: WaypointStyle = WaypointStyle.NORMAL
    description: str = ""

    @property
    def position(self) -> LatLon:
        return LatLon(self.lat, self.lon)

    @property
    def is_airfield(self) -> bool:
        return False


@dataclass
class Airfield(Waypoint):
    """A waypoint with runway and radio data."""
    runway_dir: int = 0      # [deg]
    runway_length: int = 0   # [m]
    frequency: str = ""

    @property
    def is_airfield(self) -> bool:
        return True
