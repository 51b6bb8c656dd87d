"""Shared sample data for the converter tests."""

import numpy as np
import pytest

OPENAIR_SAMPLE = """\
* Sample airspaces around Milano
AC CTR
AN MILANO CTR
AL GND
AH 2500ft AMSL
DP 45:24:00 N 009:00:00 E
DP 45:24:00 N 009:18:00 E
DP 45:36:00 N 009:18:00 E
DP 45:36:00 N 009:00:00 E

AC R
AN R 123 BRESSO
AF 122.575
AL 1000 FT AGL
AH FL65
V X=45:32:30 N 009:12:12 E
DC 2

AC Q
AN D 55 ALPS
AL FL100
AH UNLIM
V X=46:00:00 N 008:00:00 E
DP 46:00:00 N 008:10:00 E
V D=-
DA 5, 90, 0
DP 46:05:00 N 008:00:00 E
"""

OPENAIP_AIRSPACES = """\
<?xml version="1.0" encoding="UTF-8"?>
<OPENAIP VERSION="367810a0f94887bf79cd9432d2a01142b0426795" DATAFORMAT="1.1">
<AIRSPACES>
<ASP CATEGORY="CTR">
<VERSION>1</VERSION>
<ID>1</ID>
<COUNTRY>IT</COUNTRY>
<NAME>MILANO CTR</NAME>
<ALTLIMIT_TOP REFERENCE="MSL"><ALT UNIT="F">2500</ALT></ALTLIMIT_TOP>
<ALTLIMIT_BOTTOM REFERENCE="GND"><ALT UNIT="F">0</ALT></ALTLIMIT_BOTTOM>
<GEOMETRY><POLYGON>9.0 45.4, 9.3 45.4, 9.3 45.6, 9.0 45.6, 9.0 45.4</POLYGON></GEOMETRY>
</ASP>
<ASP CATEGORY="RESTRICTED">
<VERSION>1</VERSION>
<ID>2</ID>
<COUNTRY>IT</COUNTRY>
<NAME>R 123 BRESSO</NAME>
<ALTLIMIT_TOP REFERENCE="STD"><ALT UNIT="FL">65</ALT></ALTLIMIT_TOP>
<ALTLIMIT_BOTTOM REFERENCE="GND"><ALT UNIT="F">1000</ALT></ALTLIMIT_BOTTOM>
<GEOMETRY><POLYGON>9.15 45.50, 9.25 45.50, 9.25 45.58, 9.15 45.58, 9.15 45.50</POLYGON></GEOMETRY>
</ASP>
</AIRSPACES>
</OPENAIP>
"""

OPENAIP_AIRPORTS = """\
<?xml version="1.0" encoding="UTF-8"?>
<OPENAIP VERSION="367810a0f94887bf79cd9432d2a01142b0426795" DATAFORMAT="1.1">
<WAYPOINTS>
<AIRPORT TYPE="AF_CIVIL">
<COUNTRY>IT</COUNTRY>
<NAME>Milano Bresso</NAME>
<ICAO>LIMB</ICAO>
<GEOLOCATION><LAT>45.5422</LAT><LON>9.2033</LON><ELEV UNIT="M">147</ELEV></GEOLOCATION>
<RADIO CATEGORY="COMMUNICATION"><FREQUENCY>122.575</FREQUENCY><TYPE>INFO</TYPE></RADIO>
<RWY OPERATIONS="ACTIVE">
<NAME>18/36</NAME>
<SFC>ASPH</SFC>
<LENGTH UNIT="M">1080</LENGTH>
<DIRECTION TC="176"/>
<DIRECTION TC="356"/>
</RWY>
</AIRPORT>
<AIRPORT TYPE="GLIDING">
<COUNTRY>IT</COUNTRY>
<NAME>Valbrembo</NAME>
<GEOLOCATION><LAT>45.7207</LAT><LON>9.5936</LON><ELEV UNIT="M">232</ELEV></GEOLOCATION>
<RADIO CATEGORY="COMMUNICATION"><FREQUENCY>118.0125</FREQUENCY></RADIO>
<RWY OPERATIONS="ACTIVE"><SFC>GRAS</SFC><LENGTH UNIT="M">600</LENGTH><DIRECTION TC="010"/></RWY>
</AIRPORT>
</WAYPOINTS>
</OPENAIP>
"""

OPENAIP_NAVAIDS = """\
<?xml version="1.0" encoding="UTF-8"?>
<OPENAIP VERSION="367810a0f94887bf79cd9432d2a01142b0426795" DATAFORMAT="1.1">
<NAVAIDS>
<NAVAID TYPE="VOR-DME">
<COUNTRY>IT</COUNTRY>
<NAME>SARONNO</NAME>
<ID>SRN</ID>
<GEOLOCATION><LAT>45.6450</LAT><LON>9.0217</LON><ELEV UNIT="M">210</ELEV></GEOLOCATION>
<RADIO><FREQUENCY>113.70</FREQUENCY></RADIO>
</NAVAID>
<NAVAID TYPE="NDB">
<COUNTRY>IT</COUNTRY>
<NAME>BERGAMO</NAME>
<ID>BEG</ID>
<GEOLOCATION><LAT>45.6700</LAT><LON>9.7000</LON><ELEV UNIT="M">230</ELEV></GEOLOCATION>
<RADIO><FREQUENCY>379</FREQUENCY></RADIO>
</NAVAID>
</NAVAIDS>
</OPENAIP>
"""

SEEYOU_SAMPLE = """\
* Sample waypoints
name,code,country,lat,lon,elev,style,rwdir,rwlen,freq,desc
"Milano Bresso",LIMB,IT,4532.532N,00912.198E,147.0m,5,176,1080m,122.575,"Airport, civil"
"Monte Generoso",GENER,CH,4555.817N,00901.133E,1701m,7,,,,
"Lago, Maggiore",LAGO,IT,4600.000N,00840.000E,193ft,1,,,,
-----Related Tasks-----
"Task",???
"""


def write_file(path, content):
    path.write_text(content, encoding="utf-8")
    return str(path)


@pytest.fixture
def openair_file(tmp_path):
    return write_file(tmp_path / "milano.txt", OPENAIR_SAMPLE)


@pytest.fixture
def seeyou_file(tmp_path):
    return write_file(tmp_path / "points.cup", SEEYOU_SAMPLE)


@pytest.fixture
def openaip_dir(tmp_path):
    directory = tmp_path / "openaip"
    directory.mkdir()
    write_file(directory / "it_asp.aip", OPENAIP_AIRSPACES)
    write_file(directory / "it_wpt.aip", OPENAIP_AIRPORTS)
    write_file(directory / "it_nav.aip", OPENAIP_NAVAIDS)
    return directory


def write_hgt(path, samples):
    """Write a square grid of elevations as a big-endian SRTM tile."""
    np.asarray(samples, dtype=">i2").tofile(str(path))
    return str(path)


@pytest.fixture
def hgt_file(tmp_path):
    """A flat 3 arc-second SRTM tile at 100 m covering N45 E009."""
    return write_hgt(tmp_path / "N45E009.hgt", np.full((1201, 1201), 100))
