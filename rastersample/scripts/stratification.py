import logging
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from rastersample.errors import InvalidArgument
from rastersample.scripts.parameter import cell_column, strata_suffix
from rastersample.scripts.raster import Raster

logger = logging.getLogger("rastersample.scripts.stratification")


def validate_breaks(
    n_strata: int,
    equal_split: bool = True,
    probs: Optional[Sequence[float]] = None,
    vals: Optional[Sequence[float]] = None,
) -> None:
    """Check that exactly one break-point policy is configured.

    Raises:
        InvalidArgument: If the policies conflict, a cut vector has the
            wrong length, or the cuts are out of order or out of range
    """
    if n_strata < 1:
        raise InvalidArgument("`n_strata` must be at least 1.")
    if equal_split and (probs is not None or vals is not None):
        raise InvalidArgument("If `equal_split`, both `probs` and `vals` must be None.")
    if not equal_split and probs is None and vals is None:
        raise InvalidArgument(
            "If NOT `equal_split`, either `probs` or `vals` must be specified "
            "(i.e., must be non-None)."
        )
    if not equal_split and probs is not None and vals is not None:
        raise InvalidArgument("Both `probs` and `vals` are non-None.")
    if probs is not None and len(probs) != n_strata - 1:
        raise InvalidArgument(
            "Length of `probs` should equal the number of splits "
            "(i.e., `n_strata` - 1)."
        )
    if vals is not None and len(vals) != n_strata - 1:
        raise InvalidArgument(
            "Length of `vals` should equal the number of splits "
            "(i.e., `n_strata` - 1)."
        )
    if probs is not None:
        cuts = np.asarray(probs, dtype="float64")
        if not ((cuts >= 0) & (cuts <= 1)).all():
            raise InvalidArgument(f"`probs` must lie within [0, 1], got {list(probs)}.")
    for name, cuts in (("probs", probs), ("vals", vals)):
        if cuts is None:
            continue
        cuts = np.asarray(cuts, dtype="float64")
        if np.isnan(cuts).any():
            raise InvalidArgument(f"`{name}` must not contain missing values.")
        if (np.diff(cuts) < 0).any():
            raise InvalidArgument(f"`{name}` must be in non-decreasing order.")


def compute_breaks(
    values: np.ndarray,
    n_strata: int,
    equal_split: bool = True,
    probs: Optional[Sequence[float]] = None,
    vals: Optional[Sequence[float]] = None,
) -> np.ndarray:
    """Compute the n_strata + 1 break points over non-missing values.

    Quantiles use numpy's default linear interpolation, so the same input
    always gives the same breaks.

    Args:
        values: Non-missing values
        n_strata: Number of strata
        equal_split: Split into equal-probability quantile bins
        probs: Interior cut probabilities
        vals: Interior cut values

    Returns:
        Array of break points, lowest first

    Raises:
        InvalidArgument: If the breaks are not non-decreasing, as happens
            when `vals` reach beyond the range of the data
    """
    if equal_split:
        breaks = np.quantile(values, np.linspace(0, 1, n_strata + 1))
    elif probs is not None:
        breaks = np.quantile(values, np.concatenate([[0.0], np.asarray(probs, dtype="float64"), [1.0]]))
    else:
        breaks = np.concatenate([[values.min()], np.asarray(vals, dtype="float64"), [values.max()]])

    if not np.all(np.diff(breaks) >= 0):
        raise InvalidArgument(
            f"Break points must be non-decreasing, got {breaks.tolist()}; "
            "`vals` must lie within the range of the data."
        )
    return breaks


def assign_strata(values: np.ndarray, breaks: np.ndarray) -> np.ndarray:
    """Label each value with the 1-based interval (breaks[i-1], breaks[i]].

    The minimum falls into the first interval and values beyond the outer
    breaks are clipped to the first or last label.
    """
    n_strata = len(breaks) - 1
    labels = np.searchsorted(breaks[1:-1], values, side="left") + 1
    return np.clip(labels, 1, n_strata).astype("int64")


def stratify(
    x,
    n_strata: int,
    equal_split: bool = True,
    probs: Optional[Sequence[float]] = None,
    vals: Optional[Sequence[float]] = None,
):
    """Stratify a numeric vector or the first band of a raster.

    Args:
        x: Numeric sequence, pandas Series or Raster (first band only)
        n_strata: Number of strata
        equal_split: Split into equally populated quantile bins
        probs: Increasing cut probabilities in (0, 1), length n_strata - 1
        vals: Increasing cut values, length n_strata - 1

    Returns:
        A Raster named "<band>_strata" for raster input, an Int64 Series for
        Series input, otherwise an int64 array (a nullable Int64 array when
        some values are missing)

    Raises:
        InvalidArgument: If the break-point policy is invalid or there is no
            non-missing value to stratify
    """
    validate_breaks(n_strata, equal_split, probs, vals)

    if isinstance(x, Raster):
        band = x.subset(0)
        df = band.to_frame(cells=True, na_rm=True)
        vec = df[band.names[0]].to_numpy()
    else:
        vec = pd.Series(x).astype("float64").to_numpy()
    present = ~np.isnan(vec)
    if not present.any():
        raise InvalidArgument("Cannot stratify: no non-missing values.")

    breaks = compute_breaks(vec[present], n_strata, equal_split, probs, vals)
    logger.debug(f"Stratifying {present.sum()} values with breaks {breaks}")

    if isinstance(x, Raster):
        band.set_values(df[cell_column].to_numpy(), assign_strata(vec, breaks))
        return band.rename([f"{band.names[0]}{strata_suffix}"])

    labels = pd.array(np.zeros(vec.size, dtype="int64"), dtype="Int64")
    labels[present] = assign_strata(vec[present], breaks)
    labels[~present] = pd.NA

    if isinstance(x, pd.Series):
        return pd.Series(labels, index=x.index, name=x.name)
    if present.all():
        return labels.to_numpy(dtype="int64")
    return labels
