"""Test cases for the batch conversion of an OpenAIP directory."""

import zipfile

from airspaceconverter.converter import AipContents, AirspaceConverter, ConverterConfig

from conftest import OPENAIP_AIRSPACES, write_file


def make_converter(warnings=None, errors=None):
    config = ConverterConfig()
    if warnings is not None:
        config.log_warning = warnings.append
    if errors is not None:
        config.log_error = errors.append
    return AirspaceConverter(config)


class TestIndex:
    """Indexing '<cc>_<role>.aip' files by country."""

    def test_index(self, openaip_dir):
        write_file(openaip_dir / "it_hot.aip", OPENAIP_AIRSPACES)
        index = make_converter().index_openaip_dir(str(openaip_dir))
        assert index == {"it": AipContents(asp=True, hot=True, nav=True, wpt=True)}

    def test_badly_named_files_warn(self, tmp_path):
        write_file(tmp_path / "italy.aip", OPENAIP_AIRSPACES)
        write_file(tmp_path / "it_xyz.aip", OPENAIP_AIRSPACES)
        write_file(tmp_path / "readme.txt", "not an aip file")
        (tmp_path / "fr_asp.aip").write_bytes(b"")
        warnings = []
        index = make_converter(warnings=warnings).index_openaip_dir(str(tmp_path))
        assert index == {}
        assert len(warnings) == 2
        # files are visited in sorted order, "_" sorts before "a"
        assert warnings[0].endswith(": it_xyz")
        assert warnings[1].endswith(": italy")


class TestConvertDirectory:
    """One set of output files per country."""

    def test_outputs(self, openaip_dir):
        converter = make_converter()
        assert converter.convert_openaip_dir(str(openaip_dir))
        for name in ("it_asp.txt", "it_wpt.cup", "it_nav.cup", "it.kmz"):
            assert (openaip_dir / name).exists(), name
        assert not converter.airspaces
        assert not converter.waypoints

    def test_airspaces(self, openaip_dir):
        make_converter().convert_openaip_dir(str(openaip_dir))
        text = (openaip_dir / "it_asp.txt").read_text(encoding="utf-8")
        assert "AN MILANO CTR" in text
        assert "AN R 123 BRESSO" in text

    def test_airfields_and_navaids_are_split(self, openaip_dir):
        make_converter().convert_openaip_dir(str(openaip_dir))
        airfields = (openaip_dir / "it_wpt.cup").read_text(encoding="utf-8")
        navaids = (openaip_dir / "it_nav.cup").read_text(encoding="utf-8")
        assert "Milano Bresso" in airfields
        assert "SARONNO" not in airfields
        assert "SARONNO" in navaids
        assert "BERGAMO" in navaids
        assert "Milano Bresso" not in navaids

    def test_kmz_has_everything_once(self, openaip_dir):
        make_converter().convert_openaip_dir(str(openaip_dir))
        with zipfile.ZipFile(str(openaip_dir / "it.kmz")) as kmz:
            text = kmz.read("doc.kml").decode("utf-8")
        assert "MILANO CTR" in text
        assert "SARONNO" in text
        # airfields are reloaded after the navaids, not duplicated
        assert text.count("<name>Valbrembo</name>") == 1

    def test_only_airspaces(self, tmp_path):
        write_file(tmp_path / "ch_asp.aip", OPENAIP_AIRSPACES)
        assert make_converter().convert_openaip_dir(str(tmp_path))
        assert (tmp_path / "ch_asp.txt").exists()
        assert (tmp_path / "ch.kmz").exists()
        assert not (tmp_path / "ch_wpt.cup").exists()

    def test_invalid_directory(self, tmp_path):
        errors = []
        assert not make_converter(errors=errors).convert_openaip_dir(str(tmp_path / "missing"))
        assert errors
        assert not make_converter().convert_openaip_dir("")

    def test_empty_directory(self, tmp_path):
        errors = []
        assert not make_converter(errors=errors).convert_openaip_dir(str(tmp_path))
        assert errors == ["no .aip files found in directory: " + str(tmp_path)]
