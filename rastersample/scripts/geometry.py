"""Vector output for sample results."""

import logging
from typing import Optional

import geopandas as gpd
import pandas as pd
from pyproj import CRS
from shapely.geometry import LineString, Point

from rastersample.errors import InvalidArgument
from rastersample.scripts.parameter import cell_column, target_crs_str
from rastersample.scripts.raster import Raster

logger = logging.getLogger("rastersample.scripts.geometry")


def _as_pyproj(crs) -> Optional[CRS]:
    if crs is None:
        return None
    if hasattr(crs, "to_wkt"):
        return CRS.from_wkt(crs.to_wkt())
    return CRS.from_user_input(crs)


def samples_to_points(
    samples: pd.DataFrame, raster: Raster, to_geographic: bool = False
) -> gpd.GeoDataFrame:
    """Place sampled records at the centre of their raster cell.

    Args:
        samples: Records carrying a ``cell`` column
        raster: Raster the records were sampled from
        to_geographic: Reproject the points to EPSG:4326

    Returns:
        GeoDataFrame with one point per record, in the raster CRS unless
        reprojected

    Raises:
        InvalidArgument: If records lack a valid cell id, or reprojection is
            asked for a raster without CRS
    """
    if cell_column not in samples.columns:
        raise InvalidArgument(f"Samples need a `{cell_column}` column to be placed")
    cells = pd.array(samples[cell_column], dtype="Int64")
    if cells.isna().any():
        raise InvalidArgument("Some samples have no cell id")

    xs, ys = raster.xy(cells.to_numpy(dtype="int64"))
    points = gpd.GeoDataFrame(
        samples.copy(),
        geometry=[Point(x, y) for x, y in zip(xs, ys)],
        crs=_as_pyproj(raster.crs),
    )

    if to_geographic:
        if points.crs is None:
            raise InvalidArgument("Cannot reproject samples from a raster without CRS")
        if not points.crs.is_geographic:
            points = points.to_crs(target_crs_str)
    return points


def transects_to_lines(transects: pd.DataFrame, crs=None) -> gpd.GeoDataFrame:
    """Join the vertices of each transect into a line.

    Args:
        transects: Vertices with transect, x and y columns, in drawing order
        crs: CRS of the coordinates (rasterio or pyproj CRS, or any user input)

    Returns:
        GeoDataFrame with one LineString per transect id
    """
    missing = [c for c in ("transect", "x", "y") if c not in transects.columns]
    if missing:
        raise InvalidArgument(f"Transect vertices lack column(s) {missing}")

    ids, lines = [], []
    for transect, vertices in transects.groupby("transect", sort=True):
        ids.append(transect)
        lines.append(LineString(vertices[["x", "y"]].to_numpy()))

    logger.debug(f"Built {len(lines)} transect lines")
    return gpd.GeoDataFrame({"transect": ids}, geometry=lines, crs=_as_pyproj(crs))
