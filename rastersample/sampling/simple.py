"""Simple random sampling strategy implementation.

Simple random sampling gives every record (or raster cell) an equal
probability of being selected. This is the most basic sampling method and
serves as the baseline for comparison with other methods.
"""

import logging
from typing import List

import pandas as pd

from rastersample.sampling.base import SamplingStrategy
from rastersample.sampling.types import SamplingInputs, SamplingMethod
from rastersample.scripts.tabular import sample_random

logger = logging.getLogger("rastersample.sampling.simple")


class RandomSamplingStrategy(SamplingStrategy):
    """Strategy for simple random sampling without replacement."""

    @property
    def method(self) -> SamplingMethod:
        return SamplingMethod.RANDOM

    @property
    def display_name(self) -> str:
        return "Simple Random Sampling"

    @property
    def description(self) -> str:
        return (
            "Select records or raster cells uniformly at random, without "
            "replacement."
        )

    def validate_inputs(self, inputs: SamplingInputs) -> List[str]:
        return []

    def sample(self, inputs: SamplingInputs) -> pd.DataFrame:
        return sample_random(inputs.candidates, inputs.n)
