import logging
from typing import Callable, Optional

import numpy as np
import pandas as pd

from rastersample.errors import InvalidArgument
from rastersample.scripts.engines import run_engine, transect_sample
from rastersample.scripts.parameter import cell_column
from rastersample.scripts.raster import Raster

logger = logging.getLogger("rastersample.scripts.transect")

RANDOMNESS_MODES = {
    "random": "pseudo",
    "balanced": "quasi",
}


def candidate_lattice(raster: Raster, drop_na: bool = True) -> pd.DataFrame:
    """Candidate points (cell centres) with their inclusion weights.

    The first band decides eligibility: with ``drop_na`` non-missing cells
    weigh 1 and missing cells are NaN, otherwise every cell weighs 1.

    Returns:
        DataFrame with x, y and values, sorted by ascending y then x
    """
    band = raster.subset(0)
    if drop_na:
        band.values[0] = np.where(np.isnan(band.values[0]), np.nan, 1.0)
    else:
        band.values[0] = 1.0

    lattice = band.rename(["values"]).to_frame(cells=False, xy=True, na_rm=False)
    return lattice.sort_values(["y", "x"], kind="stable").reset_index(drop=True)


def transect_config(method: str, control: Optional[dict] = None) -> dict:
    """Base transect configuration for ``method`` updated with ``control``.

    Raises:
        InvalidArgument: If method is neither "random" nor "balanced"
    """
    if method not in RANDOMNESS_MODES:
        raise InvalidArgument(
            f"Transect sampling supports 'random' or 'balanced', got '{method}'"
        )
    config = {"pattern": "line", "randomness_mode": RANDOMNESS_MODES[method]}
    config.update(control or {})
    return config


def sample_transect(
    raster: Raster,
    n: int,
    method: str,
    drop_na: bool = True,
    control: Optional[dict] = None,
    engine: Callable = transect_sample,
) -> pd.DataFrame:
    """Sample ``n`` transects and attach the raster cell and values to each vertex.

    Args:
        raster: Source raster
        n: Number of transects
        method: "random" (pseudo-random) or "balanced" (quasi-random)
        drop_na: Only start from and score non-missing cells
        control: Options passed to the engine, overriding the base ones
        engine: Transect engine, see engines.transect_sample

    Returns:
        DataFrame with transect, x, y, cell and one column per band

    Raises:
        InvalidArgument: On an unsupported method
        ExternalEngineFailure: If the engine fails
    """
    config = transect_config(method, control)
    lattice = candidate_lattice(raster, drop_na=drop_na)

    points = run_engine(
        "Transect",
        engine,
        n,
        lattice[["x", "y"]].to_numpy(),
        lattice["values"].to_numpy(),
        config,
    )
    points = pd.DataFrame(points).reset_index(drop=True)

    cells = raster.cell_from_xy(points["x"].to_numpy(), points["y"].to_numpy())
    values = raster.extract(cells)
    logger.debug(
        f"{points['transect'].nunique()} transects, {len(points)} vertices, "
        f"{int(cells.isna().sum())} off the grid"
    )
    return pd.concat(
        [points, pd.DataFrame({cell_column: cells}), values], axis=1
    )
