"""Spatially balanced sampling strategy implementations.

Balanced sampling spreads the selected cells over the raster according to
an inclusion-probability surface. The stratified variant gives every
stratum the same total inclusion mass.
"""

import logging
from typing import List

import pandas as pd

from rastersample.sampling.base import SamplingStrategy
from rastersample.sampling.types import SamplingInputs, SamplingMethod
from rastersample.scripts.balanced import sample_balanced

logger = logging.getLogger("rastersample.sampling.balanced")


class BalancedSamplingStrategy(SamplingStrategy):
    """Strategy for spatially balanced sampling of raster cells.

    The number of selected cells may differ slightly from ``n``.
    """

    @property
    def method(self) -> SamplingMethod:
        return SamplingMethod.BALANCED

    @property
    def display_name(self) -> str:
        return "Spatially Balanced Sampling"

    @property
    def description(self) -> str:
        return (
            "Spread sample cells evenly over the raster with a quasi-random "
            "design. Best for even spatial coverage."
        )

    @property
    def requires_raster(self) -> bool:
        return True

    @property
    def uses_candidates(self) -> bool:
        return False

    def validate_inputs(self, inputs: SamplingInputs) -> List[str]:
        """Validate inputs for balanced sampling."""
        if inputs.strata_var is None:
            return []
        if not isinstance(inputs.strata_var, str):
            return ["`strata_var` must be a single band name for balanced sampling"]
        return self._validate_fields(inputs, inputs.strata_var, "strata_var")

    def sample(self, inputs: SamplingInputs) -> pd.DataFrame:
        return sample_balanced(
            inputs.data,
            inputs.n,
            strata_var=inputs.strata_var,
            drop_na=inputs.drop_na,
            engine=inputs.engines.quasi,
        )


class BalancedStratifiedSamplingStrategy(BalancedSamplingStrategy):
    """Strategy for spatially balanced sampling with equal mass per stratum."""

    @property
    def method(self) -> SamplingMethod:
        return SamplingMethod.BALANCED_STRATIFIED

    @property
    def display_name(self) -> str:
        return "Spatially Balanced Stratified Sampling"

    @property
    def description(self) -> str:
        return (
            "Spatially balanced sampling where every stratum of `strata_var` "
            "carries the same total inclusion probability."
        )

    def validate_inputs(self, inputs: SamplingInputs) -> List[str]:
        """Validate inputs for balanced stratified sampling."""
        if inputs.strata_var is None:
            return ["if `method` is 'balanced-stratified', then `strata_var` must be specified"]
        return super().validate_inputs(inputs)
