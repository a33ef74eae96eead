"""Conditioned Latin hypercube sampling strategy implementation.

cLHS selects records whose marginal distributions over the design
variables follow those of the whole population. The optimisation itself is
done by the configured engine.
"""

import logging
from typing import List

import pandas as pd

from rastersample.sampling.base import SamplingStrategy
from rastersample.sampling.types import SamplingInputs, SamplingMethod
from rastersample.scripts.hypercube import sample_clh
from rastersample.scripts.parameter import clh_default_iterations

logger = logging.getLogger("rastersample.sampling.clh")


class ClhSamplingStrategy(SamplingStrategy):
    """Strategy for conditioned Latin hypercube sampling."""

    @property
    def method(self) -> SamplingMethod:
        return SamplingMethod.CLH

    @property
    def display_name(self) -> str:
        return "Conditioned Latin Hypercube Sampling"

    @property
    def description(self) -> str:
        return (
            "Select records that cover the distribution of each `clh_var` "
            "variable, keeping their correlations."
        )

    def validate_inputs(self, inputs: SamplingInputs) -> List[str]:
        """Validate inputs for cLHS."""
        errors = []

        if inputs.clh_var is None or isinstance(inputs.clh_var, str) or len(inputs.clh_var) < 2:
            errors.append("if `method` is 'clh', then `clh_var` must name at least two fields")
        else:
            errors.extend(self._validate_fields(inputs, inputs.clh_var, "clh_var"))

        if inputs.clh_iter is not None and inputs.clh_iter < 1:
            errors.append("`clh_iter` must be a positive number")

        return errors

    def sample(self, inputs: SamplingInputs) -> pd.DataFrame:
        iterations = inputs.clh_iter or clh_default_iterations
        logger.debug(f"cLHS over {list(inputs.clh_var)} with {iterations} iterations")
        return sample_clh(
            inputs.candidates,
            inputs.n,
            vars=list(inputs.clh_var),
            iter=int(iterations),
            engine=inputs.engines.clh,
        )
