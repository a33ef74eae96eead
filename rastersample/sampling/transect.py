"""Line transect sampling strategy implementation.

Transects are straight lines of points laid over the raster. The sampling
method decides how their starting points are drawn: "random" draws them
pseudo-randomly, "balanced" from a quasi-random (spatially balanced)
sequence.
"""

import logging
from typing import List, Optional

import pandas as pd

from rastersample.sampling.base import SamplingStrategy
from rastersample.sampling.types import SampleType, SamplingInputs, SamplingMethod
from rastersample.scripts.transect import sample_transect

logger = logging.getLogger("rastersample.sampling.transect")


class TransectSamplingStrategy(SamplingStrategy):
    """Strategy for line transect sampling over a raster."""

    supported_methods = (SamplingMethod.RANDOM, SamplingMethod.BALANCED)

    @property
    def method(self) -> Optional[SamplingMethod]:
        # Handles every method of supported_methods
        return None

    @property
    def display_name(self) -> str:
        return "Line Transect Sampling"

    @property
    def description(self) -> str:
        return (
            "Lay straight transects over the raster, with random or spatially "
            "balanced starting points. Each transect vertex carries its cell values."
        )

    @property
    def sample_type(self) -> SampleType:
        return SampleType.LINE

    @property
    def requires_raster(self) -> bool:
        return True

    @property
    def uses_candidates(self) -> bool:
        return False

    def validate_inputs(self, inputs: SamplingInputs) -> List[str]:
        """Validate inputs for transect sampling."""
        errors = []
        if inputs.method not in self.supported_methods:
            errors.append(
                "if `type` is 'line', then `method` must be either 'random' or 'balanced'"
            )
        if inputs.control is not None and not isinstance(inputs.control, dict):
            errors.append("`control` must be a dict of transect options")
        return errors

    def sample(self, inputs: SamplingInputs) -> pd.DataFrame:
        return sample_transect(
            inputs.data,
            inputs.n,
            method=inputs.method.value,
            drop_na=inputs.drop_na,
            control=inputs.control,
            engine=inputs.engines.transect,
        )
