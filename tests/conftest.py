import numpy as np
import pandas as pd
import pytest

from rastersample import Raster, SamplingEngines


@pytest.fixture(autouse=True)
def seed():
    np.random.seed(42)


@pytest.fixture
def grid():
    """10 x 10 raster whose values equal the cell ids 1..100."""
    return Raster.from_cells(np.arange(1, 101), nrows=10, ncols=10)


@pytest.fixture
def grid_with_na():
    """Same grid with the first 20 cells missing."""
    values = np.arange(1, 101, dtype="float64")
    values[:20] = np.nan
    return Raster.from_cells(values, nrows=10, ncols=10)


@pytest.fixture
def strata_grid():
    """Two bands: values 1..100 and five strata of 20 cells each."""
    values = np.vstack([np.arange(1, 101), np.repeat(np.arange(1, 6), 20)])
    return Raster.from_cells(values, nrows=10, ncols=10, names=["values", "strata"])


@pytest.fixture
def frame():
    rng = np.random.default_rng(0)
    return pd.DataFrame(
        {
            "x": np.arange(1, 101),
            "y": rng.normal(size=100),
            "strata": np.repeat(list("ABCDE"), 20),
        }
    )


@pytest.fixture
def recorder():
    """Engines that record their arguments and answer deterministically."""
    calls = {}

    def clh(data, size, iterations):
        calls["clh"] = {"data": data, "size": size, "iterations": iterations}
        return np.arange(size)

    def quasi(n, dimension, inclusion_probs):
        calls["quasi"] = {"n": n, "dimension": dimension, "surface": inclusion_probs}
        weights = np.nan_to_num(inclusion_probs.values[0].ravel(), nan=0.0)
        ids = np.flatnonzero(weights > 0)[:n] + 1
        return pd.DataFrame({"ID": ids})

    def transect(n, potential_sites, inclusion_probs, control):
        calls["transect"] = {
            "n": n,
            "sites": potential_sites,
            "weights": inclusion_probs,
            "control": control,
        }
        eligible = potential_sites[~np.isnan(inclusion_probs)]
        frames = [
            pd.DataFrame({"transect": t, "x": eligible[t:t + 2, 0], "y": eligible[t:t + 2, 1]})
            for t in range(1, n + 1)
        ]
        return pd.concat(frames, ignore_index=True)

    return calls, SamplingEngines(clh=clh, quasi=quasi, transect=transect)
