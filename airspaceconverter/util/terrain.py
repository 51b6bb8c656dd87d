"""Terrain elevation lookup from SRTM raster tiles.

Used to resolve AGL altitudes to AMSL when writing KML. Tiles are SRTM
``.hgt`` files: a square grid of big-endian signed 16 bit elevations in
meters, 1201 (3 arc-seconds) or 3601 (1 arc-second) samples per side,
covering one degree whose south-west corner is given by the file name,
e.g. ``N45E007.hgt``.
"""

import logging
import math
import os
import re
from typing import List, Optional

import numpy as np

logger = logging.getLogger(__name__)

RE_HGT_NAME = re.compile(r"^(?P<ns>[NS])(?P<lat>\d{2})(?P<ew>[EW])(?P<lon>\d{3})$", re.IGNORECASE)
HGT_SIZES = {1201 * 1201: 1201, 3601 * 3601: 3601}  # samples per tile: samples per side
HGT_VOID = -32768


class RasterMap:
    """A single one degree SRTM tile held as a 2-D int16 array, north row first."""

    def __init__(self, south: int, west: int, samples: np.ndarray):
        self.south = south
        self.west = west
        self.samples = samples

    @property
    def size(self) -> int:
        return self.samples.shape[0]

    @classmethod
    def load(cls, path: str) -> Optional['RasterMap']:
        stem = os.path.splitext(os.path.basename(path))[0]
        m = RE_HGT_NAME.match(stem)
        if not m:
            logger.error("Terrain file name not understood: %s", path)
            return None
        south = int(m.group('lat')) * (-1 if m.group('ns').upper() == 'S' else 1)
        west = int(m.group('lon')) * (-1 if m.group('ew').upper() == 'W' else 1)
        try:
            data = np.fromfile(path, dtype=">i2")
        except OSError as e:
            logger.error("Failed to read terrain file %s: %s", path, e)
            return None
        size = HGT_SIZES.get(data.size)
        if size is None:
            logger.error("Unexpected terrain file size %i: %s", data.size * 2, path)
            return None
        return cls(south, west, data.reshape((size, size)).astype(np.int16))

    def covers(self, lat: float, lon: float) -> bool:
        return self.south <= lat <= self.south + 1 and self.west <= lon <= self.west + 1

    def elevation(self, lat: float, lon: float) -> Optional[float]:
        """Bilinear interpolated elevation in meters, None outside or next to voids."""
        if not self.covers(lat, lon):
            return None
        cells = self.size - 1
        row_f = (self.south + 1 - lat) * cells
        col_f = (lon - self.west) * cells
        row0 = min(int(math.floor(row_f)), cells)
        col0 = min(int(math.floor(col_f)), cells)
        row1 = min(row0 + 1, cells)
        col1 = min(col0 + 1, cells)
        dr = row_f - row0
        dc = col_f - col0

        corners = self.samples[[row0, row0, row1, row1], [col0, col1, col0, col1]]
        if (corners == HGT_VOID).any():
            return None
        z00, z01, z10, z11 = corners.astype(float)
        return float(z00 * (1 - dr) * (1 - dc) +
                     z01 * (1 - dr) * dc +
                     z10 * dr * (1 - dc) +
                     z11 * dr * dc)


class TerrainMaps:
    """Registry of loaded raster maps with a default terrain altitude.

    Example:
        terrain = TerrainMaps()
        terrain.add_terrain_map("N45E007.hgt")
        terrain.elevation(45.5, 7.5)  # meters or None
    """

    def __init__(self, default_terrain_altitude: float = 0.0):
        self._maps: List[RasterMap] = []
        self.default_terrain_altitude = default_terrain_altitude

    def add_terrain_map(self, path: str) -> bool:
        raster = RasterMap.load(path)
        if raster is None:
            return False
        self._maps.append(raster)
        logger.debug("Loaded terrain tile %s (%i samples per side)", path, raster.size)
        return True

    @property
    def num_of_raster_maps(self) -> int:
        return len(self._maps)

    def clear_terrain_maps(self) -> None:
        self._maps = []

    def elevation(self, lat: float, lon: float) -> Optional[float]:
        """Terrain elevation in meters, None if not covered by any map."""
        if math.isnan(lat) or math.isnan(lon):
            return None
        for raster in self._maps:
            value = raster.elevation(lat, lon)
            if value is not None:
                return value
        return None
