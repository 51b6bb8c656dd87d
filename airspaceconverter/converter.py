"""
Conversion orchestrator.

Owns the airspace and waypoint collections and the terrain maps, and
drives the load -> filter -> convert -> unload cycle, including the batch
conversion of a directory of OpenAIP files.

Example:
    converter = AirspaceConverter()
    converter.add_airspace_file("italy.txt")
    converter.load_airspaces()
    converter.output_file = "italy.kmz"
    converter.convert()
"""

import logging
import os
import subprocess
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from .airspace import Airspace, AirspaceType
from .formats import OutputType, airspace_reader, determine_type, put_type_extension, waypoint_reader
from .targets import kml, openair, polish, seeyou
from .util.geometry import Limits
from .util.multimap import CategoryMultiMap
from .util.terrain import TerrainMaps
from .util.units import QNE
from .waypoint import Waypoint, WaypointStyle

logger = logging.getLogger(__name__)

AIP_ROLES = ("asp", "wpt", "nav", "hot")


@dataclass
class ConverterConfig:
    """Options and injected collaborators of a conversion session."""
    log_message: Callable[[str], None] = logger.info
    log_warning: Callable[[str], None] = logger.warning
    log_error: Callable[[str], None] = logger.error
    map_compiler_command: str = "cgpsmapper"
    map_compiler: Optional[Callable[[str, str], bool]] = None  # (polish_file, output_file) -> success
    do_not_calculate_arcs: bool = False
    write_coordinates_as_ddmmss: bool = False
    process_line_strings: bool = False
    qnh: float = QNE  # [hPa]
    default_terrain_altitude: float = 0.0  # [m]

    def run_map_compiler(self, polish_file: str, output_file: str) -> bool:
        """Run '<map_compiler_command> <polish_file> -o <output_file>'."""
        self.log_message("Invoking cGPSmapper to make: " + output_file)
        args = [self.map_compiler_command, polish_file, "-o", output_file]
        self.log_message("Executing: " + " ".join(args))
        try:
            result = subprocess.run(args)
        except OSError as e:
            self.log_error("Unable to run %s: %s" % (self.map_compiler_command, e))
            return False
        if result.returncode != 0:
            self.log_error("%d returned by cGPSmapper." % result.returncode)
            return False
        return True

    def compile_map(self, polish_file: str, output_file: str) -> bool:
        if self.map_compiler is not None:
            return self.map_compiler(polish_file, output_file)
        return self.run_map_compiler(polish_file, output_file)


class SessionState(Enum):
    EMPTY = "empty"
    LOADED = "loaded"
    FILTERED = "filtered"
    CONVERTED = "converted"
    UNLOADED = "unloaded"


@dataclass
class AipContents:
    """What an OpenAIP directory holds for one country."""
    asp: bool = False
    hot: bool = False
    nav: bool = False
    wpt: bool = False


class AirspaceConverter:
    """Loads, filters and converts airspaces and waypoints."""

    def __init__(self, config: Optional[ConverterConfig] = None):
        self.config = config or ConverterConfig()
        self.airspaces: CategoryMultiMap[AirspaceType, Airspace] = CategoryMultiMap()
        self.waypoints: CategoryMultiMap[WaypointStyle, Waypoint] = CategoryMultiMap()
        self.terrain = TerrainMaps(self.config.default_terrain_altitude)
        self.airspace_files: List[str] = []
        self.waypoint_files: List[str] = []
        self.terrain_map_files: List[str] = []
        self.output_file = ""
        self.state = SessionState.EMPTY
        self.conversion_done = False

    # Pending input files

    def add_airspace_file(self, path: str) -> None:
        self.airspace_files.append(path)

    def add_waypoint_file(self, path: str) -> None:
        self.waypoint_files.append(path)

    def add_terrain_map_file(self, path: str) -> None:
        self.terrain_map_files.append(path)

    # Settings

    @property
    def qnh(self) -> float:
        return self.config.qnh

    @qnh.setter
    def qnh(self, value: float) -> None:
        self.config.qnh = value

    @property
    def default_terrain_altitude(self) -> float:
        return self.terrain.default_terrain_altitude

    @default_terrain_altitude.setter
    def default_terrain_altitude(self, meters: float) -> None:
        self.config.default_terrain_altitude = meters
        self.terrain.default_terrain_altitude = meters

    @property
    def num_of_terrain_maps(self) -> int:
        return self.terrain.num_of_raster_maps

    @property
    def output_type(self) -> OutputType:
        return determine_type(self.output_file)

    def _loaded(self) -> None:
        self.conversion_done = False
        self.state = SessionState.LOADED

    # Loading

    def load_airspaces(self, output_type_hint: OutputType = OutputType.KMZ) -> None:
        """Read all pending airspace files, suggesting an output name if none is set."""
        if not self.airspace_files:
            return
        initial = len(self.airspaces)
        for path in self.airspace_files:
            reader = airspace_reader(path)
            if reader is None:
                self.config.log_warning("Unknown extension for airspace file: " + path)
                continue
            before = len(self.airspaces)
            reader.read(path, self.airspaces, self.config.process_line_strings)
            if len(self.airspaces) > before and not self.output_file:
                self.output_file = put_type_extension(output_type_hint, path) or ""
        self.config.log_message("Read %d airspace definition(s) from %d file(s)."
                                % (len(self.airspaces) - initial, len(self.airspace_files)))
        self.airspace_files = []
        self._loaded()

    def load_waypoints(self) -> None:
        """Read all pending waypoint files, suggesting a KMZ output name if none is set."""
        if not self.waypoint_files:
            return
        counter = 0
        initial = len(self.waypoints)
        for path in self.waypoint_files:
            reader = waypoint_reader(path)
            if reader is None:
                self.config.log_warning("Unknown extension for waypoint file: " + path)
                continue
            if reader.read(path, self.waypoints) is None:
                continue
            counter += 1
            if not self.output_file:
                self.output_file = put_type_extension(OutputType.KMZ, path)
        self.waypoint_files = []
        if counter > 0:
            self.config.log_message("Read successfully %d waypoint(s) from %d file(s)."
                                    % (len(self.waypoints) - initial, counter))
        self._loaded()

    def load_terrain_raster_maps(self) -> None:
        if not self.terrain_map_files:
            return
        self.conversion_done = False
        counter = sum(1 for path in self.terrain_map_files if self.terrain.add_terrain_map(path))
        self.terrain_map_files = []
        if counter > 0:
            self.config.log_message("Read successfully %d terrain raster map file(s)." % counter)

    # Unloading

    def _unloaded(self) -> None:
        self.conversion_done = False
        if not self.airspaces and not self.waypoints:
            self.state = SessionState.UNLOADED

    def unload_airspaces(self) -> None:
        self.airspaces.clear()
        self.output_file = ""
        self._unloaded()

    def unload_waypoints(self) -> None:
        self.waypoints.clear()
        if not self.airspaces:
            self.output_file = ""
        self._unloaded()

    def unload_raster_maps(self) -> None:
        self.conversion_done = False
        self.terrain.clear_terrain_maps()

    # Filtering

    def filter_on_lat_lon_limits(self, top_lat: float, bottom_lat: float, left_lon: float, right_lon: float) -> bool:
        """Drop everything lying entirely outside the given box.

        Returns:
            False if the limits are invalid, True otherwise
        """
        limits = Limits(top_lat, bottom_lat, left_lon, right_lon)
        if limits.is_unbounded:
            return True
        if not limits.is_valid():
            self.config.log_error("Invalid limits: top %g, bottom %g, left %g, right %g"
                                  % (top_lat, bottom_lat, left_lon, right_lon))
            return False
        self.conversion_done = False
        if self.airspaces:
            excluded = self.airspaces.remove_if(lambda a: not a.is_within_limits(limits))
            self.config.log_message("Filtering airspaces... excluded: %d, remaining: %d"
                                    % (excluded, len(self.airspaces)))
        if self.waypoints:
            excluded = self.waypoints.remove_if(lambda w: not limits.is_position_within(w.position))
            self.config.log_message("Filtering waypoints... excluded: %d, remaining: %d"
                                    % (excluded, len(self.waypoints)))
        self.state = SessionState.FILTERED
        return True

    # Conversion

    def convert(self) -> bool:
        """Write the loaded data to output_file in the format given by its extension."""
        assert self.output_file, "output file not set"
        self.conversion_done = False
        output_type = self.output_type
        if output_type is OutputType.KMZ:
            self.terrain.default_terrain_altitude = self.config.default_terrain_altitude
            writer = kml.KMLWriter(self.terrain, self.config.qnh)
            if writer.write(self.output_file, self.airspaces, self.waypoints):
                self.conversion_done = True
                if self.terrain.num_of_raster_maps == 0:
                    self.config.log_warning("no raster terrain map loaded, used default terrain height"
                                            " for all applicable AGL points.")
                elif not writer.all_agl_altitudes_covered:
                    self.config.log_warning("not all AGL altitudes were under coverage of the loaded terrain map(s).")
        elif output_type is OutputType.OPENAIR:
            self.conversion_done = openair.write(self.output_file, self.airspaces,
                                                 self.config.do_not_calculate_arcs,
                                                 self.config.write_coordinates_as_ddmmss)
        elif output_type is OutputType.SEEYOU:
            self.conversion_done = seeyou.write(self.output_file, self.waypoints)
        elif output_type is OutputType.POLISH:
            self.conversion_done = polish.write(self.output_file, self.airspaces)
        elif output_type is OutputType.GARMIN:
            polish_file = put_type_extension(OutputType.POLISH, self.output_file)
            self.config.log_message("Building Polish file: " + polish_file)
            if polish.write(polish_file, self.airspaces) and self.config.compile_map(polish_file, self.output_file):
                self.conversion_done = True
                try:
                    os.remove(polish_file)
                except OSError as e:
                    self.config.log_warning("Unable to remove %s: %s" % (polish_file, e))
        else:
            self.config.log_error("Output file extension/type unknown.")
            return False
        if self.conversion_done:
            self.state = SessionState.CONVERTED
        return self.conversion_done

    # OpenAIP batch

    def index_openaip_dir(self, directory: str) -> Dict[str, AipContents]:
        """Index the '<cc>_<role>.aip' files of a directory by country code."""
        index: Dict[str, AipContents] = {}
        for entry in sorted(os.listdir(directory)):
            path = os.path.join(directory, entry)
            stem, ext = os.path.splitext(entry)
            if ext.lower() != ".aip" or not os.path.isfile(path) or os.path.getsize(path) == 0:
                continue
            if len(stem) != 6 or stem[2] != "_":
                self.config.log_warning("openAIP filename expected as <country code>_<content code> but found: " + stem)
                continue
            country, role = stem[:2], stem[3:]
            if role not in AIP_ROLES:
                self.config.log_warning("not able to understand the content type from the name of openAIP file: "
                                        + stem)
                continue
            setattr(index.setdefault(country, AipContents()), role, True)
        return index

    def _convert_to(self, output_file: str) -> bool:
        self.output_file = output_file
        return self.convert()

    def convert_openaip_dir(self, directory: str) -> bool:
        """Convert every country of an OpenAIP directory.

        For each country: airspaces to '<cc>_asp.txt', airfields to
        '<cc>_wpt.cup', navaids to '<cc>_nav.cup', and everything together
        to '<cc>.kmz'. Both collections are empty afterwards.
        """
        if not directory:
            return False
        if not os.path.isdir(directory):
            self.config.log_error("input openAIP airspace directory is not a valid directory: " + directory)
            return False
        self.unload_airspaces()
        self.unload_waypoints()

        index = self.index_openaip_dir(directory)
        if not index:
            self.config.log_error("no .aip files found in directory: " + directory)
            return False

        for country, contents in sorted(index.items()):
            base = os.path.join(directory, country)
            airfields_file = ""

            if contents.asp:
                self.add_airspace_file(base + "_asp.aip")
                self.load_airspaces()
                self._convert_to(base + "_asp.txt")

            if contents.wpt:
                airfields_file = base + "_wpt.aip"
                self.add_waypoint_file(airfields_file)
                self.load_waypoints()
                self._convert_to(base + "_wpt.cup")

            if contents.nav:
                if contents.wpt:
                    self.unload_waypoints()
                self.add_waypoint_file(base + "_nav.aip")
                self.load_waypoints()
                self._convert_to(base + "_nav.cup")
                if airfields_file:
                    self.add_waypoint_file(airfields_file)
                    self.load_waypoints()

            self._convert_to(base + ".kmz")
            self.unload_airspaces()
            self.unload_waypoints()
        return True
