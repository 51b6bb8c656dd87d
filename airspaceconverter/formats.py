"""
File format registry.

Maps file extensions to output types and to the readers able to load
airspaces or waypoints from them. The set of formats is fixed:

  Input:  .txt (OpenAir), .aip (OpenAIP), .kml/.kmz (Google Earth), .cup (SeeYou)
  Output: .kmz (default), .txt, .cup, .mp (Polish), .img (Garmin)
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

from .sources import kml as kml_source
from .sources import openaip, openair, seeyou


class OutputType(Enum):
    KMZ = "kmz"
    OPENAIR = "txt"
    SEEYOU = "cup"
    POLISH = "mp"
    GARMIN = "img"
    UNKNOWN = ""

    @property
    def extension(self) -> str:
        return "." + self.value if self.value else ""


_TYPE_BY_EXT: Dict[str, OutputType] = {t.extension: t for t in OutputType if t is not OutputType.UNKNOWN}


@dataclass
class ReaderDesc:
    """A reader for one input extension."""
    extension: str
    name: str
    read: Callable


def _read_kml(path, airspaces, process_line_strings=False):
    return kml_source.read_kml(path, airspaces, process_line_strings)


def _read_kmz(path, airspaces, process_line_strings=False):
    return kml_source.read_kmz(path, airspaces, process_line_strings)


def _read_openair(path, airspaces, process_line_strings=False):
    return openair.read(path, airspaces)


def _read_openaip_airspaces(path, airspaces, process_line_strings=False):
    return openaip.read_airspaces(path, airspaces)


AIRSPACE_READERS: Dict[str, ReaderDesc] = {r.extension: r for r in [
    ReaderDesc(".txt", "OpenAir", _read_openair),
    ReaderDesc(".aip", "OpenAIP", _read_openaip_airspaces),
    ReaderDesc(".kml", "Google Earth KML", _read_kml),
    ReaderDesc(".kmz", "Google Earth KMZ", _read_kmz),
]}

WAYPOINT_READERS: Dict[str, ReaderDesc] = {r.extension: r for r in [
    ReaderDesc(".cup", "SeeYou", seeyou.read),
    ReaderDesc(".aip", "OpenAIP", openaip.read_waypoints),
]}


def _extension(path: str) -> str:
    return os.path.splitext(path)[1].lower()


def airspace_reader(path: str) -> Optional[ReaderDesc]:
    """Reader for an airspace file, by case-insensitive extension."""
    return AIRSPACE_READERS.get(_extension(path))


def waypoint_reader(path: str) -> Optional[ReaderDesc]:
    return WAYPOINT_READERS.get(_extension(path))


def determine_type(path: str) -> OutputType:
    """Output type from the file extension, KMZ for an empty path."""
    if not path:
        return OutputType.KMZ
    return _TYPE_BY_EXT.get(_extension(path), OutputType.UNKNOWN)


def put_type_extension(output_type: OutputType, path: str) -> Optional[str]:
    """Replace the extension of path with the one of output_type.

    Returns None for an empty path or an unknown type.
    """
    if not path or output_type is OutputType.UNKNOWN:
        return None
    return os.path.splitext(path)[0] + output_type.extension
