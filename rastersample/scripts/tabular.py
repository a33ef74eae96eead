"""Record-level sampling: simple random, threshold-biased and stratified.

Draws use numpy's process-wide random state (pandas ``sample`` with no
``random_state``), so ``np.random.seed`` makes them reproducible.
"""

import logging
import math
from typing import Sequence, Union

import pandas as pd

from rastersample.errors import InsufficientData, InvalidArgument

logger = logging.getLogger("rastersample.scripts.tabular")

FieldNames = Union[str, Sequence[str]]


def as_field_list(names: FieldNames) -> list:
    return [names] if isinstance(names, str) else list(names)


def require_fields(data: pd.DataFrame, names: FieldNames) -> list:
    """Return the field names as a list, failing on any unknown field.

    Raises:
        InvalidArgument: If a field is not a column of data
    """
    fields = as_field_list(names)
    missing = [name for name in fields if name not in data.columns]
    if missing:
        raise InvalidArgument(
            f"Field(s) {missing} not found (available: {list(data.columns)})"
        )
    return fields


def sample_random(data: pd.DataFrame, n: int) -> pd.DataFrame:
    """Draw n records uniformly without replacement.

    Raises:
        InsufficientData: If n exceeds the number of records
    """
    if n > len(data):
        raise InsufficientData(
            f"Cannot sample {n} records without replacement from {len(data)}"
        )
    return data.sample(n=n)


def sample_biased(data: pd.DataFrame, n: int, var: str, thresh: float) -> pd.DataFrame:
    """Draw n records among those whose ``var`` value exceeds ``thresh``.

    Raises:
        InvalidArgument: If var is not a field of data
        InsufficientData: If fewer than n records pass the threshold
    """
    require_fields(data, var)
    eligible = data[data[var] > thresh]
    logger.debug(f"{len(eligible)} of {len(data)} records have {var} > {thresh}")
    if n > len(eligible):
        raise InsufficientData(
            f"Only {len(eligible)} records have `{var}` > {thresh}, cannot sample {n}"
        )
    return eligible.sample(n=n)


def sample_stratified(data: pd.DataFrame, n: int, var: FieldNames) -> pd.DataFrame:
    """Draw ceil(n / k) records from each of the k groups of ``var``.

    Groups holding fewer records than the quota contribute all of them, so
    the result has at most ``k * ceil(n / k)`` records. Missing values of
    ``var`` form their own group.

    Args:
        data: Records to sample
        n: Requested total sample size
        var: Field (or fields) defining the strata

    Returns:
        Sampled records ordered by stratum
    """
    fields = require_fields(data, var)
    if data.empty:
        raise InsufficientData("Cannot sample strata from an empty table")

    n_strata = len(data[fields].drop_duplicates())
    quota = math.ceil(n / n_strata)
    logger.debug(f"{n_strata} strata of {fields}, drawing {quota} records from each")

    parts = []
    for key, group in data.groupby(fields, dropna=False, sort=True):
        size = min(quota, len(group))
        if size < quota:
            logger.debug(f"Stratum {key} has only {len(group)} records, taking all")
        parts.append(group.sample(n=size))
    return pd.concat(parts)
