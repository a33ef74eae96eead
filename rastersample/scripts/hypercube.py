import logging
from typing import Callable, Sequence

import pandas as pd

from rastersample.errors import InvalidArgument
from rastersample.scripts.engines import clhs, run_engine
from rastersample.scripts.tabular import require_fields

logger = logging.getLogger("rastersample.scripts.hypercube")


def sample_clh(
    data: pd.DataFrame,
    n: int,
    vars: Sequence[str],
    iter: int,
    engine: Callable = clhs,
) -> pd.DataFrame:
    """Conditioned Latin hypercube sample over the design variables ``vars``.

    Only the design variables are handed to the engine; the positions it
    returns are resolved against the full records, so every field is kept.

    Args:
        data: Candidate records
        n: Sample size
        vars: At least two design fields
        iter: Iterations for the engine's optimisation
        engine: cLHS engine, see engines.clhs

    Returns:
        Selected records in the order returned by the engine

    Raises:
        InvalidArgument: If fewer than two fields are named or one is unknown
        ExternalEngineFailure: If the engine fails
    """
    fields = require_fields(data, vars)
    if len(fields) < 2:
        raise InvalidArgument("`clh_var` must name at least two fields")

    positions = run_engine("Conditioned Latin hypercube", engine, data[fields], n, iter)
    logger.debug(f"cLHS selected {len(positions)} of {len(data)} records")
    return data.iloc[list(positions)]
