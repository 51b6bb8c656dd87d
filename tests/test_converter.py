"""Test cases for the conversion orchestrator."""

import os
import shutil
import zipfile

import pytest

from airspaceconverter.converter import AirspaceConverter, ConverterConfig, SessionState
from airspaceconverter.formats import OutputType, determine_type, put_type_extension


class Recorder:
    """Collects the messages sent through the logging strategies."""

    def __init__(self):
        self.messages = []
        self.warnings = []
        self.errors = []

    def config(self, **kwargs):
        return ConverterConfig(log_message=self.messages.append,
                               log_warning=self.warnings.append,
                               log_error=self.errors.append,
                               **kwargs)


@pytest.fixture
def recorder():
    return Recorder()


class TestOutputTypes:
    """Mapping between extensions and output types."""

    @pytest.mark.parametrize("path,output_type", [
        ("", OutputType.KMZ),
        ("a.kmz", OutputType.KMZ),
        ("a.KMZ", OutputType.KMZ),
        ("a.txt", OutputType.OPENAIR),
        ("a.cup", OutputType.SEEYOU),
        ("a.mp", OutputType.POLISH),
        ("dir/a.IMG", OutputType.GARMIN),
        ("a.kml", OutputType.UNKNOWN),
        ("a", OutputType.UNKNOWN),
    ])
    def test_determine_type(self, path, output_type):
        assert determine_type(path) is output_type

    @pytest.mark.parametrize("output_type", [
        OutputType.KMZ, OutputType.OPENAIR, OutputType.SEEYOU, OutputType.POLISH, OutputType.GARMIN,
    ])
    def test_put_type_extension_is_inverse(self, output_type):
        path = put_type_extension(output_type, "out/italy.aip")
        assert determine_type(path) is output_type
        assert path.startswith("out/italy.")

    def test_put_type_extension_rejects(self):
        assert put_type_extension(OutputType.KMZ, "") is None
        assert put_type_extension(OutputType.UNKNOWN, "a.txt") is None


class TestLoading:
    """Pending files, readers by extension and suggested output names."""

    def test_load_airspaces(self, openair_file, recorder):
        converter = AirspaceConverter(recorder.config())
        assert converter.state is SessionState.EMPTY
        converter.add_airspace_file(openair_file)
        converter.load_airspaces()
        assert len(converter.airspaces) == 3
        assert converter.airspace_files == []
        assert converter.output_file == os.path.splitext(openair_file)[0] + ".kmz"
        assert converter.state is SessionState.LOADED
        assert "Read 3 airspace definition(s) from 1 file(s)." in recorder.messages

    def test_output_hint(self, openair_file):
        converter = AirspaceConverter()
        converter.add_airspace_file(openair_file)
        converter.load_airspaces(OutputType.POLISH)
        assert converter.output_type is OutputType.POLISH

    def test_user_output_is_kept(self, openair_file):
        converter = AirspaceConverter()
        converter.output_file = "mine.txt"
        converter.add_airspace_file(openair_file)
        converter.load_airspaces()
        assert converter.output_file == "mine.txt"

    def test_unknown_extension(self, tmp_path, recorder):
        converter = AirspaceConverter(recorder.config())
        converter.add_airspace_file(str(tmp_path / "airspace.xyz"))
        converter.load_airspaces()
        assert not converter.airspaces
        assert converter.output_file == ""
        assert recorder.warnings
        # the pending list is cleared anyway
        assert converter.airspace_files == []

    def test_uppercase_extension(self, tmp_path, openair_file):
        path = tmp_path / "UPPER.TXT"
        path.write_bytes(open(openair_file, "rb").read())
        converter = AirspaceConverter()
        converter.add_airspace_file(str(path))
        converter.load_airspaces()
        assert len(converter.airspaces) == 3

    def test_load_waypoints(self, seeyou_file, recorder):
        converter = AirspaceConverter(recorder.config())
        converter.add_waypoint_file(seeyou_file)
        converter.load_waypoints()
        assert len(converter.waypoints) == 3
        assert converter.output_file.endswith("points.kmz")
        assert "Read successfully 3 waypoint(s) from 1 file(s)." in recorder.messages

    def test_failed_waypoint_file(self, tmp_path, recorder):
        converter = AirspaceConverter(recorder.config())
        converter.add_waypoint_file(str(tmp_path / "missing.cup"))
        converter.load_waypoints()
        assert not converter.waypoints
        assert converter.output_file == ""
        assert not recorder.messages

    def test_bad_numeric_field_is_not_fatal(self, tmp_path):
        path = tmp_path / "nan.cup"
        path.write_text('"Not a number",NAN,IT,4500.000N,00700.000E,1200m,nan,inf,,,\n', encoding="utf-8")
        converter = AirspaceConverter()
        converter.add_waypoint_file(str(path))
        converter.load_waypoints()
        assert len(converter.waypoints) == 1
        assert converter.waypoint_files == []

    def test_terrain_maps(self, hgt_file, recorder):
        converter = AirspaceConverter(recorder.config())
        converter.add_terrain_map_file(hgt_file)
        converter.load_terrain_raster_maps()
        assert converter.num_of_terrain_maps == 1
        assert "Read successfully 1 terrain raster map file(s)." in recorder.messages
        converter.unload_raster_maps()
        assert converter.num_of_terrain_maps == 0


class TestSettings:
    """QNH and default terrain altitude passthroughs."""

    def test_qnh(self):
        converter = AirspaceConverter()
        assert converter.qnh == 1013.25
        converter.qnh = 1020
        assert converter.config.qnh == 1020

    def test_default_terrain_altitude(self):
        converter = AirspaceConverter(ConverterConfig(default_terrain_altitude=120))
        assert converter.default_terrain_altitude == 120
        converter.default_terrain_altitude = 300
        assert converter.terrain.default_terrain_altitude == 300


class TestUnloading:
    """Unloading clears the suggested output name."""

    def test_unload(self, openair_file, seeyou_file):
        converter = AirspaceConverter()
        converter.add_airspace_file(openair_file)
        converter.add_waypoint_file(seeyou_file)
        converter.load_airspaces()
        converter.load_waypoints()
        converter.unload_waypoints()
        # airspaces still loaded, output name kept
        assert converter.output_file
        converter.unload_airspaces()
        assert converter.output_file == ""
        assert not converter.airspaces
        assert not converter.waypoints
        assert converter.state is SessionState.UNLOADED


class TestFiltering:
    """Geographic filter over both collections."""

    def load(self, openair_file, seeyou_file, recorder=None):
        converter = AirspaceConverter(recorder.config() if recorder else None)
        converter.add_airspace_file(openair_file)
        converter.add_waypoint_file(seeyou_file)
        converter.load_airspaces()
        converter.load_waypoints()
        return converter

    def test_filter(self, openair_file, seeyou_file, recorder):
        converter = self.load(openair_file, seeyou_file, recorder)
        # around Milano only: the Alps danger area and Lago Maggiore are outside
        assert converter.filter_on_lat_lon_limits(45.7, 45.3, 8.9, 9.4)
        assert sorted(a.name for a in converter.airspaces) == ["MILANO CTR", "R 123 BRESSO"]
        assert [w.name for w in converter.waypoints] == ["Milano Bresso"]
        assert "Filtering airspaces... excluded: 1, remaining: 2" in recorder.messages
        assert "Filtering waypoints... excluded: 2, remaining: 1" in recorder.messages
        assert converter.state is SessionState.FILTERED

    def test_filter_is_idempotent(self, openair_file, seeyou_file):
        converter = self.load(openair_file, seeyou_file)
        converter.filter_on_lat_lon_limits(45.7, 45.3, 8.9, 9.4)
        names = [a.name for a in converter.airspaces]
        converter.filter_on_lat_lon_limits(45.7, 45.3, 8.9, 9.4)
        assert [a.name for a in converter.airspaces] == names

    def test_sentinel_filters_nothing(self, openair_file, seeyou_file, recorder):
        converter = self.load(openair_file, seeyou_file, recorder)
        assert converter.filter_on_lat_lon_limits(90, -90, -180, 180)
        assert len(converter.airspaces) == 3
        assert len(converter.waypoints) == 3
        assert not [m for m in recorder.messages if m.startswith("Filtering")]

    def test_straddling_airspace_is_kept(self, openair_file, seeyou_file):
        converter = self.load(openair_file, seeyou_file)
        # the box cuts the CTR in half
        assert converter.filter_on_lat_lon_limits(45.5, 45.0, 8.0, 9.1)
        assert "MILANO CTR" in [a.name for a in converter.airspaces]

    def test_invalid_limits(self, openair_file, seeyou_file, recorder):
        converter = self.load(openair_file, seeyou_file, recorder)
        assert not converter.filter_on_lat_lon_limits(44, 46, 8, 9)
        assert recorder.errors
        assert len(converter.airspaces) == 3


class TestConvert:
    """Dispatch on the output type."""

    def loaded(self, openair_file, seeyou_file=None, **config):
        converter = AirspaceConverter(ConverterConfig(**config))
        converter.add_airspace_file(openair_file)
        converter.load_airspaces()
        if seeyou_file:
            converter.add_waypoint_file(seeyou_file)
            converter.load_waypoints()
        return converter

    def test_kmz(self, openair_file, seeyou_file, tmp_path):
        converter = self.loaded(openair_file, seeyou_file)
        converter.output_file = str(tmp_path / "out.kmz")
        assert converter.convert()
        assert converter.conversion_done
        assert converter.state is SessionState.CONVERTED
        with zipfile.ZipFile(converter.output_file) as kmz:
            text = kmz.read("doc.kml").decode("utf-8")
        assert "MILANO CTR" in text
        assert "Monte Generoso" in text

    def test_kmz_warns_without_terrain(self, openair_file, tmp_path, recorder):
        converter = AirspaceConverter(recorder.config())
        converter.add_airspace_file(openair_file)
        converter.load_airspaces()
        converter.output_file = str(tmp_path / "out.kmz")
        assert converter.convert()
        assert any("no raster terrain map loaded" in w for w in recorder.warnings)

    def test_kmz_warns_on_partial_coverage(self, openair_file, hgt_file, tmp_path, recorder):
        converter = AirspaceConverter(recorder.config())
        converter.add_terrain_map_file(hgt_file)
        converter.load_terrain_raster_maps()
        converter.add_airspace_file(openair_file)
        converter.load_airspaces()
        converter.output_file = str(tmp_path / "out.kmz")
        assert converter.convert()
        # the CTR lies on the N45E009 tile, the Alps danger area does not, but it is all AMSL
        assert not any("not all AGL altitudes" in w for w in recorder.warnings)

    def test_openair_options(self, openair_file, tmp_path):
        converter = self.loaded(openair_file, do_not_calculate_arcs=True, write_coordinates_as_ddmmss=True)
        converter.output_file = str(tmp_path / "out.txt")
        assert converter.convert()
        text = open(converter.output_file, encoding="utf-8").read()
        assert "DC " not in text
        assert "DP 45:24:00 N 009:00:00 E" in text

    def test_seeyou(self, openair_file, seeyou_file, tmp_path):
        converter = self.loaded(openair_file, seeyou_file)
        converter.output_file = str(tmp_path / "out.cup")
        assert converter.convert()
        assert "Monte Generoso" in open(converter.output_file, encoding="utf-8").read()

    def test_polish(self, openair_file, tmp_path):
        converter = self.loaded(openair_file)
        converter.output_file = str(tmp_path / "out.mp")
        assert converter.convert()
        assert os.path.exists(converter.output_file)

    def test_garmin(self, openair_file, tmp_path):
        calls = []

        def compiler(polish_file, output_file):
            calls.append((polish_file, output_file))
            with open(output_file, "wb") as f:
                f.write(b"IMG")
            return True

        converter = self.loaded(openair_file, map_compiler=compiler)
        converter.output_file = str(tmp_path / "out.img")
        assert converter.convert()
        assert calls == [(str(tmp_path / "out.mp"), str(tmp_path / "out.img"))]
        assert not os.path.exists(tmp_path / "out.mp")

    def test_garmin_failure_keeps_polish(self, openair_file, tmp_path):
        converter = self.loaded(openair_file, map_compiler=lambda polish_file, output_file: False)
        converter.output_file = str(tmp_path / "out.img")
        assert not converter.convert()
        assert os.path.exists(tmp_path / "out.mp")
        assert converter.state is SessionState.LOADED

    def test_garmin_missing_compiler(self, openair_file, tmp_path):
        converter = self.loaded(openair_file, map_compiler_command=str(tmp_path / "no-such-cgpsmapper"))
        converter.output_file = str(tmp_path / "out.img")
        assert not converter.convert()
        assert os.path.exists(tmp_path / "out.mp")

    def test_garmin_compiler_messages_use_hooks(self, openair_file, tmp_path, recorder):
        command = str(tmp_path / "no-such-cgpsmapper")
        converter = AirspaceConverter(recorder.config(map_compiler_command=command))
        converter.add_airspace_file(openair_file)
        converter.load_airspaces()
        converter.output_file = str(tmp_path / "out.img")
        assert not converter.convert()
        assert "Invoking cGPSmapper to make: " + str(tmp_path / "out.img") in recorder.messages
        assert any(m.startswith("Executing: " + command) for m in recorder.messages)
        assert len(recorder.errors) == 1
        assert recorder.errors[0].startswith("Unable to run " + command)

    @pytest.mark.skipif(shutil.which("false") is None, reason="needs the false command")
    def test_garmin_compiler_exit_code(self, openair_file, tmp_path, recorder):
        converter = AirspaceConverter(recorder.config(map_compiler_command=shutil.which("false")))
        converter.add_airspace_file(openair_file)
        converter.load_airspaces()
        converter.output_file = str(tmp_path / "out.img")
        assert not converter.convert()
        assert recorder.errors == ["1 returned by cGPSmapper."]
        assert os.path.exists(tmp_path / "out.mp")

    def test_unknown_type(self, openair_file, tmp_path, recorder):
        converter = AirspaceConverter(recorder.config())
        converter.add_airspace_file(openair_file)
        converter.load_airspaces()
        converter.output_file = str(tmp_path / "out.xyz")
        assert not converter.convert()
        assert "Output file extension/type unknown." in recorder.errors

    def test_empty_output_path(self):
        with pytest.raises(AssertionError):
            AirspaceConverter().convert()
