"""Default sampling engines.

The adapters in this package never draw balanced, hypercube or transect
samples themselves: they prepare candidates and weights, call an engine and
read its answer back. Each engine is a plain callable with a narrow
signature, bundled in ``SamplingEngines`` so callers can plug in their own.

Engines:
    clhs(data, size, iterations) -> 0-based row positions, computed by the
        ``clhs`` package
    quasi_sample(n, dimension, inclusion_probs) -> DataFrame with x, y, ID
    transect_sample(n, potential_sites, inclusion_probs, control)
        -> DataFrame with transect, x, y

The quasi-random and transect engines only place scipy Halton points and
straight lines over the inclusion weights. Their randomness is drawn from
numpy's global state and the Halton sequences are scrambled with a seed
taken from it, so ``np.random.seed`` reproduces their runs.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

import clhs as cl
import numpy as np
import pandas as pd
from scipy.spatial import cKDTree
from scipy.stats import qmc

from rastersample.errors import ExternalEngineFailure
from rastersample.scripts.parameter import transect_control

logger = logging.getLogger("rastersample.scripts.engines")


def _seed() -> int:
    return int(np.random.randint(0, 2**31 - 1))


def run_engine(step: str, engine: Callable, *args, **kwargs):
    """Call an engine, reporting any failure as ExternalEngineFailure.

    Args:
        step: Name of the sampling step, used in the error message
        engine: The engine callable
        *args: Positional arguments for the engine
        **kwargs: Keyword arguments for the engine

    Returns:
        Whatever the engine returns

    Raises:
        ExternalEngineFailure: If the engine raises anything
    """
    logger.debug(f"Running {step} engine {getattr(engine, '__name__', engine)}")
    try:
        return engine(*args, **kwargs)
    except ExternalEngineFailure:
        raise
    except Exception as e:
        raise ExternalEngineFailure(f"{step} engine failed: {e}") from e


# --- Conditioned Latin hypercube ---


def clhs(data: pd.DataFrame, size: int, iterations: int = 10000) -> np.ndarray:
    """Conditioned Latin hypercube sample computed by the ``clhs`` package.

    Args:
        data: Numeric design variables, one column each
        size: Number of records to select
        iterations: Annealing iterations of the optimiser

    Returns:
        Sorted 0-based positions of the selected rows

    Raises:
        ExternalEngineFailure: If the data is not numeric, has missing values,
            or holds fewer rows than ``size``
    """
    try:
        values = data.to_numpy(dtype="float64")
    except (TypeError, ValueError) as e:
        raise ExternalEngineFailure(f"cLHS needs numeric variables: {e}") from e
    if np.isnan(values).any():
        raise ExternalEngineFailure("cLHS input contains missing values")

    n_rows = len(values)
    if size < 1 or size > n_rows:
        raise ExternalEngineFailure(f"cLHS cannot select {size} of {n_rows} records")
    if size == n_rows:
        return np.arange(n_rows)

    predictors = pd.DataFrame(values, columns=[str(c) for c in data.columns])
    result = cl.clhs(predictors, size, max_iterations=iterations)
    positions = np.sort(np.asarray(result["sample_indices"], dtype="int64"))
    logger.debug(f"cLHS selected {len(positions)} records in {iterations} iterations")
    return positions


# --- Spatially balanced quasi-random sampling ---


def quasi_sample(
    n: int,
    dimension: int,
    inclusion_probs,
    batch_size: Optional[int] = None,
    max_batches: int = 1000,
) -> pd.DataFrame:
    """Spatially balanced sample from a scrambled Halton sequence.

    Points of a (dimension + 1)-D Halton sequence are placed over the raster
    grid; a point is kept when its last coordinate falls under the relative
    inclusion probability of the cell it lands in. Two points may land in the
    same cell, so the number of distinct cells can be lower than ``n``.

    Args:
        n: Number of points
        dimension: Spatial dimension, only 2 is supported
        inclusion_probs: Single-band Raster of non-negative weights (NaN = 0)
        batch_size: Halton points drawn per round
        max_batches: Rounds before giving up

    Returns:
        DataFrame with x, y, ID (cell id) and inclusion_probabilities

    Raises:
        ExternalEngineFailure: On unsupported dimension, invalid weights or
            when not enough points are accepted
    """
    if dimension != 2:
        raise ExternalEngineFailure(f"Quasi-random sampling supports 2 dimensions, got {dimension}")

    weights = np.nan_to_num(inclusion_probs.values[0], nan=0.0)
    if (weights < 0).any():
        raise ExternalEngineFailure("Inclusion probabilities must not be negative")
    top = weights.max()
    if top <= 0:
        raise ExternalEngineFailure("Inclusion probabilities are zero over the whole raster")

    nrow, ncol = weights.shape
    halton = qmc.Halton(d=dimension + 1, scramble=True, seed=_seed())
    batch = batch_size or max(1024, 10 * n)

    rows, cols, accepted = [], [], 0
    for _ in range(max_batches):
        points = halton.random(batch)
        r = np.minimum((points[:, 1] * nrow).astype("int64"), nrow - 1)
        c = np.minimum((points[:, 0] * ncol).astype("int64"), ncol - 1)
        keep = points[:, 2] * top < weights[r, c]
        rows.append(r[keep])
        cols.append(c[keep])
        accepted += int(keep.sum())
        if accepted >= n:
            break
    else:
        raise ExternalEngineFailure(
            f"Quasi-random sampler accepted {accepted} of {n} points after {max_batches} rounds"
        )

    r = np.concatenate(rows)[:n]
    c = np.concatenate(cols)[:n]
    ids = r * ncol + c + 1
    xs, ys = inclusion_probs.xy(ids)
    return pd.DataFrame(
        {
            "x": xs,
            "y": ys,
            "ID": ids,
            "inclusion_probabilities": weights[r, c] / weights.sum() * n,
        }
    )


# --- Transects ---


def _lattice_spacing(sites: np.ndarray) -> np.ndarray:
    gaps = []
    for axis in range(2):
        coords = np.unique(sites[:, axis])
        gaps.append(np.diff(coords).min() if coords.size > 1 else np.nan)
    gaps = np.asarray(gaps)
    if np.isnan(gaps).all():
        return np.ones(2)
    return np.where(np.isnan(gaps), np.nanmin(gaps), gaps)


class _SiteWeights:
    """Looks up the inclusion weight of arbitrary points from the nearest site."""

    def __init__(self, sites: np.ndarray, weights: np.ndarray):
        spacing = _lattice_spacing(sites)
        self.tree = cKDTree(sites)
        self.weights = weights
        self.tolerance = 0.5 * float(np.hypot(*spacing)) * (1 + 1e-9)
        self.lower = sites.min(axis=0) - spacing / 2
        self.upper = sites.max(axis=0) + spacing / 2

    def __call__(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        points = np.column_stack([xs, ys])
        inside = ((points >= self.lower) & (points <= self.upper)).all(axis=1)
        dist, index = self.tree.query(points)
        return np.where(inside & (dist <= self.tolerance), self.weights[index], 0.0)


def _pseudo_starts(n: int, sites: np.ndarray, weights: np.ndarray) -> np.ndarray:
    eligible = int((weights > 0).sum())
    index = np.random.choice(
        len(sites), size=n, replace=n > eligible, p=weights / weights.sum()
    )
    return sites[index]


def _quasi_starts(n: int, lookup: _SiteWeights, max_batches: int = 1000) -> np.ndarray:
    halton = qmc.Halton(d=3, scramble=True, seed=_seed())
    top = lookup.weights.max()
    starts = []
    for _ in range(max_batches):
        points = halton.random(max(256, 10 * n))
        xy = qmc.scale(points[:, :2], lookup.lower, lookup.upper)
        keep = points[:, 2] * top < lookup(xy[:, 0], xy[:, 1])
        starts.extend(xy[keep])
        if len(starts) >= n:
            return np.asarray(starts[:n])
    raise ExternalEngineFailure(f"Could only place {len(starts)} of {n} transect starts")


def _best_line(start, steps: np.ndarray, n_rotate: int, lookup: _SiteWeights):
    offset = np.random.uniform(0, 2 * np.pi)
    best_score, best = -1.0, None
    for angle in offset + 2 * np.pi * np.arange(n_rotate) / n_rotate:
        xs = start[0] + steps * np.cos(angle)
        ys = start[1] + steps * np.sin(angle)
        score = lookup(xs, ys).mean()
        if score > best_score:
            best_score, best = score, (xs, ys)
    return best


def transect_sample(
    n: int,
    potential_sites: np.ndarray,
    inclusion_probs: Sequence[float],
    control: Optional[dict] = None,
) -> pd.DataFrame:
    """Sample ``n`` straight line transects over a lattice of candidate sites.

    Transect starts are drawn with probability proportional to the site
    weights, either independently ("pseudo") or from a scrambled Halton
    sequence ("quasi"). Each transect is a line of ``n_points`` vertices of
    length ``line_length``; among ``n_rotate`` evenly spaced directions the
    one with the highest mean inclusion weight along the line is kept.

    Control options (defaults in parameter.transect_control):
        pattern: only "line" is supported
        randomness_mode: "pseudo" or "quasi"
        n_points: vertices per transect
        n_rotate: directions tried per transect
        line_length: transect length, 10% of the shorter lattice side by default
        Unknown options (e.g. worker counts) are ignored.

    Returns:
        DataFrame with transect (1-based id), x and y for every vertex

    Raises:
        ExternalEngineFailure: On invalid sites, weights or options
    """
    config = {**transect_control, **(control or {})}
    if config["pattern"] != "line":
        raise ExternalEngineFailure(f"Unsupported transect pattern '{config['pattern']}'")
    mode = config["randomness_mode"]
    if mode not in ("pseudo", "quasi"):
        raise ExternalEngineFailure(f"Unsupported randomness mode '{mode}'")
    n_points, n_rotate = int(config["n_points"]), int(config["n_rotate"])
    if n_points < 2 or n_rotate < 1:
        raise ExternalEngineFailure("Transects need n_points >= 2 and n_rotate >= 1")

    sites = np.asarray(potential_sites, dtype="float64")
    weights = np.nan_to_num(np.asarray(inclusion_probs, dtype="float64"), nan=0.0)
    if sites.ndim != 2 or sites.shape[1] != 2 or len(sites) != len(weights):
        raise ExternalEngineFailure("Potential sites must be an (m, 2) array matching the weights")
    if not (weights > 0).any():
        raise ExternalEngineFailure("No potential site has a positive inclusion probability")

    lookup = _SiteWeights(sites, weights)
    length = config["line_length"]
    if length is None:
        length = 0.1 * float((lookup.upper - lookup.lower).min())
    steps = np.linspace(0.0, length, n_points)

    if mode == "quasi":
        starts = _quasi_starts(n, lookup)
    else:
        starts = _pseudo_starts(n, sites, weights)

    frames = []
    for transect, start in enumerate(starts, start=1):
        xs, ys = _best_line(start, steps, n_rotate, lookup)
        frames.append(pd.DataFrame({"transect": transect, "x": xs, "y": ys}))
    logger.debug(f"Generated {len(frames)} {mode} transects of {n_points} points")
    return pd.concat(frames, ignore_index=True)


@dataclass(frozen=True)
class SamplingEngines:
    """The engines used by the hypercube, balanced and transect adapters."""

    clh: Callable[..., np.ndarray] = clhs
    quasi: Callable[..., pd.DataFrame] = quasi_sample
    transect: Callable[..., pd.DataFrame] = transect_sample
