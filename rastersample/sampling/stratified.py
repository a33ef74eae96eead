"""Stratified random sampling strategy implementation.

Stratified sampling divides the population into non-overlapping subgroups
(strata) given by the values of ``strata_var`` and draws the same quota from
each of them, so that every stratum is represented.
"""

import logging
from typing import List

import pandas as pd

from rastersample.sampling.base import SamplingStrategy
from rastersample.sampling.types import SamplingInputs, SamplingMethod
from rastersample.scripts.tabular import sample_stratified

logger = logging.getLogger("rastersample.sampling.stratified")


class StratifiedSamplingStrategy(SamplingStrategy):
    """Strategy for stratified random sampling.

    Each stratum contributes ceil(n / number of strata) records, or all of
    its records when it is smaller than that.
    """

    @property
    def method(self) -> SamplingMethod:
        return SamplingMethod.STRATIFIED

    @property
    def display_name(self) -> str:
        return "Stratified Random Sampling"

    @property
    def description(self) -> str:
        return (
            "Split the records into strata by the values of `strata_var` and "
            "randomly sample the same number from each stratum."
        )

    def validate_inputs(self, inputs: SamplingInputs) -> List[str]:
        """Validate inputs for stratified sampling."""
        if inputs.strata_var is None:
            return ["if `method` is 'stratified', then `strata_var` must be specified"]
        return self._validate_fields(inputs, inputs.strata_var, "strata_var")

    def sample(self, inputs: SamplingInputs) -> pd.DataFrame:
        return sample_stratified(inputs.candidates, inputs.n, var=inputs.strata_var)
