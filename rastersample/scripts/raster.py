"""Gridded dataset used by the sampling methods.

A Raster holds one or more named bands as a float64 array of shape
``(bands, rows, cols)`` with NaN marking missing cells, together with the
rasterio affine transform and CRS that place it in space. Cells are
identified by 1-based, row-major integers (``row * ncol + col + 1``).
"""

import logging
from typing import List, Optional, Sequence, Union

import numpy as np
import pandas as pd
import rasterio
from rasterio.crs import CRS
from rasterio.transform import from_bounds, rowcol, xy

from rastersample.errors import InvalidArgument
from rastersample.scripts.parameter import band_prefix, cell_column, default_bounds

logger = logging.getLogger("rastersample.scripts.raster")

BandKey = Union[int, str]


class Raster:
    """A multi-band raster kept in memory.

    Args:
        values: Array of shape (bands, rows, cols); a 2-D array is a single band
        names: Band names, defaults to "lyr.1", "lyr.2", ...
        transform: rasterio Affine transform, defaults to a global lon/lat extent
        crs: Anything rasterio's CRS.from_user_input accepts
    """

    def __init__(self, values, names: Optional[Sequence[str]] = None, transform=None, crs=None):
        data = np.array(values, dtype="float64")
        if data.ndim == 2:
            data = data[np.newaxis, ...]
        if data.ndim != 3:
            raise InvalidArgument(
                f"Raster values must have 2 or 3 dimensions, got {data.ndim}"
            )

        if names is None:
            names = [f"{band_prefix}{i + 1}" for i in range(data.shape[0])]
        names = [str(name) for name in names]
        if len(names) != data.shape[0]:
            raise InvalidArgument(
                f"Got {len(names)} band names for {data.shape[0]} bands"
            )
        if len(set(names)) != len(names):
            raise InvalidArgument(f"Band names must be unique: {names}")

        self.values = data
        self.names: List[str] = names
        self.transform = (
            transform
            if transform is not None
            else from_bounds(*default_bounds, data.shape[2], data.shape[1])
        )
        self.crs = CRS.from_user_input(crs) if crs is not None else None

    @classmethod
    def from_cells(cls, values, nrows: int, ncols: int, **kwargs) -> "Raster":
        """Build a raster from values listed in cell order.

        Args:
            values: 1-D array (one band) or 2-D array (bands, cells)
            nrows: Number of rows
            ncols: Number of columns
            **kwargs: Passed to the constructor (names, transform, crs)

        Returns:
            New Raster
        """
        data = np.array(values, dtype="float64")
        if data.ndim == 1:
            data = data[np.newaxis, :]
        if data.shape[1] != nrows * ncols:
            raise InvalidArgument(
                f"Expected {nrows * ncols} values per band, got {data.shape[1]}"
            )
        return cls(data.reshape(data.shape[0], nrows, ncols), **kwargs)

    @classmethod
    def from_file(cls, file_path: str, bands: Optional[Sequence[int]] = None) -> "Raster":
        """Read a raster file, turning nodata into NaN.

        Args:
            file_path: Path to raster file
            bands: Optional 1-based band indexes to read (all by default)

        Returns:
            New Raster named after the band descriptions when present
        """
        with rasterio.open(file_path) as src:
            indexes = list(bands) if bands else list(src.indexes)
            data = src.read(indexes, masked=True).astype("float64").filled(np.nan)
            names = [
                src.descriptions[i - 1] or f"{band_prefix}{i}" for i in indexes
            ]
            logger.debug(f"Read {len(indexes)} band(s) from {file_path}")
            return cls(data, names=names, transform=src.transform, crs=src.crs)

    def to_file(self, file_path: str, driver: str = "GTiff") -> None:
        """Write the raster with NaN as nodata and band names as descriptions."""
        profile = {
            "driver": driver,
            "height": self.nrow,
            "width": self.ncol,
            "count": self.nlyr,
            "dtype": "float64",
            "transform": self.transform,
            "nodata": np.nan,
        }
        if self.crs is not None:
            profile["crs"] = self.crs

        with rasterio.open(file_path, "w", **profile) as dst:
            dst.write(self.values)
            for index, name in enumerate(self.names, start=1):
                dst.set_band_description(index, name)

    def __repr__(self) -> str:
        return (
            f"Raster(nlyr={self.nlyr}, nrow={self.nrow}, ncol={self.ncol}, "
            f"names={self.names})"
        )

    @property
    def nlyr(self) -> int:
        return self.values.shape[0]

    @property
    def nrow(self) -> int:
        return self.values.shape[1]

    @property
    def ncol(self) -> int:
        return self.values.shape[2]

    @property
    def ncell(self) -> int:
        return self.nrow * self.ncol

    def copy(self) -> "Raster":
        return Raster(self.values, self.names, self.transform, self.crs)

    def band_index(self, band: BandKey) -> int:
        """Resolve a band name or 0-based position, failing on unknown bands."""
        if isinstance(band, str):
            if band not in self.names:
                raise InvalidArgument(
                    f"Band '{band}' not found in raster (bands: {self.names})"
                )
            return self.names.index(band)
        if not 0 <= int(band) < self.nlyr:
            raise InvalidArgument(
                f"Band index {band} out of range for {self.nlyr} band(s)"
            )
        return int(band)

    def subset(self, band: BandKey) -> "Raster":
        """Return a single-band copy."""
        index = self.band_index(band)
        return Raster(
            self.values[index], [self.names[index]], self.transform, self.crs
        )

    def rename(self, names: Sequence[str]) -> "Raster":
        return Raster(self.values, names, self.transform, self.crs)

    def cells(self) -> np.ndarray:
        return np.arange(1, self.ncell + 1)

    def _rows_cols(self, cells) -> tuple:
        index = np.asarray(cells, dtype="int64") - 1
        if index.size and (index.min() < 0 or index.max() >= self.ncell):
            raise InvalidArgument(f"Cell ids must be within 1..{self.ncell}")
        return np.divmod(index, self.ncol)

    def complete_mask(self) -> np.ndarray:
        """Boolean (rows, cols) mask of cells with a value in every band."""
        return ~np.isnan(self.values).any(axis=0)

    def mask_incomplete(self) -> "Raster":
        """Copy with cells missing in any band set missing in all bands."""
        masked = self.copy()
        masked.values[:, ~self.complete_mask()] = np.nan
        return masked

    def to_frame(self, cells: bool = True, xy: bool = False, na_rm: bool = True) -> pd.DataFrame:
        """Convert to one record per cell.

        Args:
            cells: Include the ``cell`` identifier column
            xy: Include the cell centre coordinates as ``x`` and ``y``
            na_rm: Drop cells missing in any band

        Returns:
            DataFrame ordered by cell id
        """
        flat = self.values.reshape(self.nlyr, -1).T
        frame = pd.DataFrame(flat, columns=self.names)
        if xy:
            xs, ys = self.xy(self.cells())
            frame.insert(0, "y", ys)
            frame.insert(0, "x", xs)
        if cells:
            frame.insert(0, cell_column, self.cells())
        if na_rm:
            frame = frame[~np.isnan(flat).any(axis=1)]
        return frame.reset_index(drop=True)

    def xy(self, cells) -> tuple:
        """Cell centre coordinates for the given cell ids."""
        rows, cols = self._rows_cols(cells)
        if rows.size == 0:
            return np.array([], dtype="float64"), np.array([], dtype="float64")
        xs, ys = xy(self.transform, rows, cols, offset="center")
        return np.asarray(xs, dtype="float64"), np.asarray(ys, dtype="float64")

    def cell_from_xy(self, x, y) -> pd.arrays.IntegerArray:
        """Cell ids containing the given coordinates, missing when off-grid."""
        xs = np.atleast_1d(np.asarray(x, dtype="float64"))
        ys = np.atleast_1d(np.asarray(y, dtype="float64"))
        cells = pd.array(np.zeros(xs.size, dtype="int64"), dtype="Int64")

        finite = np.isfinite(xs) & np.isfinite(ys)
        inside = np.zeros(xs.size, dtype=bool)
        if finite.any():
            rows, cols = rowcol(self.transform, xs[finite], ys[finite])
            rows = np.asarray(rows, dtype="int64")
            cols = np.asarray(cols, dtype="int64")
            on_grid = (rows >= 0) & (rows < self.nrow) & (cols >= 0) & (cols < self.ncol)
            ids = np.zeros(xs.size, dtype="int64")
            ids[finite] = rows * self.ncol + cols + 1
            inside[finite] = on_grid
            cells = pd.array(ids, dtype="Int64")

        cells[~inside] = pd.NA
        return cells

    def extract(self, cells) -> pd.DataFrame:
        """Band values at the given cells; missing cell ids give missing values."""
        cells = pd.array(cells, dtype="Int64")
        present = ~cells.isna()
        out = np.full((len(cells), self.nlyr), np.nan)
        if present.any():
            rows, cols = self._rows_cols(cells[present].to_numpy(dtype="int64"))
            out[present] = self.values[:, rows, cols].T
        return pd.DataFrame(out, columns=self.names)

    def set_values(self, cells, values, band: BandKey = 0) -> None:
        """Assign values to cells of one band, in place."""
        rows, cols = self._rows_cols(cells)
        self.values[self.band_index(band), rows, cols] = values

    def keep_cells(self, cells) -> "Raster":
        """Copy where only the given cells keep their values."""
        cells = pd.array(cells, dtype="Int64")
        rows, cols = self._rows_cols(cells[~cells.isna()].to_numpy(dtype="int64"))
        keep = np.zeros((self.nrow, self.ncol), dtype=bool)
        keep[rows, cols] = True

        kept = self.copy()
        kept.values[:, ~keep] = np.nan
        return kept
