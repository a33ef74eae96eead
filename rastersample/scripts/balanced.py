import logging
from typing import Callable, Optional

import numpy as np
import pandas as pd

from rastersample.scripts.engines import quasi_sample, run_engine
from rastersample.scripts.parameter import cell_column, inclusion_scale
from rastersample.scripts.raster import Raster

logger = logging.getLogger("rastersample.scripts.balanced")


def inclusion_surface(
    raster: Raster, strata_var: Optional[str] = None, drop_na: bool = True
) -> Raster:
    """Build the inclusion-probability surface for balanced sampling.

    Without strata every eligible cell weighs 1 (complete cells only when
    ``drop_na``, else all cells). With strata each record weighs
    1 / (size of its stratum), scaled by ``inclusion_scale``, so that every
    stratum carries the same total mass.

    Args:
        raster: Source raster
        strata_var: Band holding the strata
        drop_na: Exclude cells missing in any band

    Returns:
        Single-band Raster aligned with the source
    """
    if strata_var is None:
        surface = raster.subset(0).rename(["inclusion_probs"])
        if drop_na:
            surface.values[0] = raster.complete_mask().astype("float64")
        else:
            surface.values[0] = 1.0
        return surface

    surface = raster.subset(strata_var)
    surface.values[0] = np.nan
    df = raster.to_frame(cells=True, na_rm=drop_na)
    sizes = df.groupby(strata_var, dropna=False)[cell_column].transform("size")
    weights = 1.0 / sizes.to_numpy(dtype="float64")
    surface.set_values(df[cell_column].to_numpy(), weights * inclusion_scale)
    logger.debug(
        f"Inclusion surface over {len(df)} cells in "
        f"{df[strata_var].nunique(dropna=False)} strata"
    )
    return surface


def sample_balanced(
    raster: Raster,
    n: int,
    strata_var: Optional[str] = None,
    drop_na: bool = True,
    engine: Callable = quasi_sample,
) -> pd.DataFrame:
    """Spatially balanced sample of raster cells.

    The engine is asked for ``n`` points; points falling in the same cell
    collapse into one record, so the result may hold fewer than ``n`` rows.

    Args:
        raster: Source raster
        n: Number of points requested from the engine
        strata_var: Band holding the strata, for equal mass per stratum
        drop_na: Exclude cells missing in any band
        engine: Quasi-random engine, see engines.quasi_sample

    Returns:
        Records (with cell ids) of the selected cells

    Raises:
        InvalidArgument: If strata_var is not a band of the raster
        ExternalEngineFailure: If the engine fails
    """
    surface = inclusion_surface(raster, strata_var=strata_var, drop_na=drop_na)
    points = run_engine("Spatially balanced", engine, n, 2, surface)

    df = raster.to_frame(cells=True, na_rm=drop_na)
    selected = df[df[cell_column].isin(np.asarray(points["ID"]))]
    if len(selected) != n:
        logger.info(f"Balanced sample holds {len(selected)} cells for n = {n}")
    return selected.reset_index(drop=True)
