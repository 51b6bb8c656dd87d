"""
AirspaceConverter command line.

Usage:
    airspaceconverter -i italy.txt -o italy.kmz            # OpenAir -> KMZ
    airspaceconverter -i it_asp.aip -w it_wpt.aip -o it.kmz
    airspaceconverter -w points.cup -t 48 -b 44 -l 6 -r 14 -o alps.cup
    airspaceconverter -p openaip_dir/                      # whole OpenAIP directory
"""

import argparse
import logging
import sys

from . import __version__
from .converter import AirspaceConverter, ConverterConfig
from .formats import OutputType, determine_type

logger = logging.getLogger("airspaceconverter")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="airspaceconverter",
        description="Convert airspace and waypoint files between OpenAir, OpenAIP, SeeYou, KML/KMZ, "
                    "Polish and Garmin IMG.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--version", action="version", version="%(prog)s " + __version__)
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    inputs = parser.add_argument_group("input")
    inputs.add_argument("-i", "--input", action="append", default=[], metavar="FILE",
                        help="Airspace file (.txt, .aip, .kml, .kmz), may be repeated")
    inputs.add_argument("-w", "--waypoints", action="append", default=[], metavar="FILE",
                        help="Waypoint file (.cup, .aip), may be repeated")
    inputs.add_argument("-m", "--terrain-map", action="append", default=[], metavar="FILE",
                        help="SRTM .hgt terrain raster map, may be repeated")
    inputs.add_argument("-p", "--openaip-dir", metavar="DIR",
                        help="Convert all <cc>_<kind>.aip files of a directory")
    inputs.add_argument("--line-strings", action="store_true",
                        help="Read KML LineStrings as airspace boundaries too")

    filtering = parser.add_argument_group("filter")
    filtering.add_argument("-t", "--top", type=float, default=90.0, help="Top latitude")
    filtering.add_argument("-b", "--bottom", type=float, default=-90.0, help="Bottom latitude")
    filtering.add_argument("-l", "--left", type=float, default=-180.0, help="Left longitude")
    filtering.add_argument("-r", "--right", type=float, default=180.0, help="Right longitude")

    output = parser.add_argument_group("output")
    output.add_argument("-o", "--output", default="", metavar="FILE",
                        help="Output file, type by extension (.kmz, .txt, .cup, .mp, .img)")
    output.add_argument("-q", "--qnh", type=float, default=1013.25, help="QNH in hPa used for flight levels")
    output.add_argument("-a", "--terrain-altitude", type=float, default=0.0,
                        help="Default terrain altitude in meters for AGL points without terrain map")
    output.add_argument("--no-arcs", action="store_true", help="OpenAir: write arcs and circles as points")
    output.add_argument("--ddmmss", action="store_true", help="OpenAir: write coordinates as DD:MM:SS")
    output.add_argument("--cgpsmapper", default="cgpsmapper", metavar="CMD", help="Map compiler command")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s: %(message)s")

    config = ConverterConfig(map_compiler_command=args.cgpsmapper,
                             do_not_calculate_arcs=args.no_arcs,
                             write_coordinates_as_ddmmss=args.ddmmss,
                             process_line_strings=args.line_strings,
                             qnh=args.qnh,
                             default_terrain_altitude=args.terrain_altitude)
    converter = AirspaceConverter(config)

    if args.openaip_dir:
        return 0 if converter.convert_openaip_dir(args.openaip_dir) else 1

    if not args.input and not args.waypoints:
        logger.error("Nothing to convert: no airspace or waypoint file given.")
        return 1

    output_type = OutputType.KMZ
    if args.output:
        output_type = determine_type(args.output)
        if output_type is OutputType.UNKNOWN:
            logger.error("Output file extension/type unknown: %s", args.output)
            return 1
        converter.output_file = args.output

    for path in args.terrain_map:
        converter.add_terrain_map_file(path)
    converter.load_terrain_raster_maps()

    for path in args.input:
        converter.add_airspace_file(path)
    converter.load_airspaces(output_type)
    for path in args.waypoints:
        converter.add_waypoint_file(path)
    converter.load_waypoints()

    if not converter.filter_on_lat_lon_limits(args.top, args.bottom, args.left, args.right):
        return 1
    if not converter.output_file:
        logger.error("Nothing read, no output file written.")
        return 1
    if not converter.convert():
        return 1
    logger.info("Output written: %s", converter.output_file)
    return 0


if __name__ == "__main__":
    sys.exit(main())
