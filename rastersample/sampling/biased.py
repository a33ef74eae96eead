"""Biased random sampling strategy implementation.

Only records whose bias variable exceeds a threshold are eligible; among
them the selection is simple random.
"""

import logging
from typing import List

import pandas as pd

from rastersample.sampling.base import SamplingStrategy
from rastersample.sampling.types import SamplingInputs, SamplingMethod
from rastersample.scripts.tabular import sample_biased

logger = logging.getLogger("rastersample.sampling.biased")


class BiasedSamplingStrategy(SamplingStrategy):
    """Strategy for random sampling above a threshold of one variable."""

    @property
    def method(self) -> SamplingMethod:
        return SamplingMethod.BIASED

    @property
    def display_name(self) -> str:
        return "Biased Random Sampling"

    @property
    def description(self) -> str:
        return (
            "Randomly select among the records whose `bias_var` value is greater "
            "than `bias_thresh`."
        )

    def validate_inputs(self, inputs: SamplingInputs) -> List[str]:
        """Validate inputs for biased sampling."""
        errors = []

        if inputs.bias_var is None:
            errors.append("if `method` is 'biased', then `bias_var` must be specified")
        elif not isinstance(inputs.bias_var, str):
            errors.append("`bias_var` must be a single field name")
        else:
            errors.extend(self._validate_fields(inputs, inputs.bias_var, "bias_var"))

        if inputs.bias_thresh is None:
            errors.append("if `method` is 'biased', then `bias_thresh` must be specified")

        return errors

    def sample(self, inputs: SamplingInputs) -> pd.DataFrame:
        return sample_biased(
            inputs.candidates, inputs.n, var=inputs.bias_var, thresh=inputs.bias_thresh
        )
