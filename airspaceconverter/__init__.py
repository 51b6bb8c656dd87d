"""AirspaceConverter: convert airspace and waypoint files between aviation formats."""

__version__ = "0.3.0"

from .airspace import Airspace, AirspaceType  # noqa: E402
from .converter import AirspaceConverter, ConverterConfig, SessionState  # noqa: E402
from .formats import OutputType, determine_type, put_type_extension  # noqa: E402
from .util.units import Altitude, parse_altitude  # noqa: E402
from .waypoint import Airfield, Waypoint, WaypointStyle  # noqa: E402

__all__ = [
    "__version__",
    "Airspace", "AirspaceType",
    "AirspaceConverter", "ConverterConfig", "SessionState",
    "OutputType", "determine_type", "put_type_extension",
    "Altitude", "parse_altitude",
    "Airfield", "Waypoint", "WaypointStyle",
]
