"""Sampling strategies module.

Each sampling method is implemented as a Strategy class that handles:
- Input validation
- Drawing the sample from the prepared input

Usage:
    from rastersample.sampling import spatial_sample

    samples = spatial_sample(raster, n=10, method="random")
"""

from rastersample.sampling.base import SamplingStrategy
from rastersample.sampling.service import (
    get_available_methods,
    get_sampling_strategy,
    spatial_sample,
)
from rastersample.sampling.types import (
    InputKind,
    SampleType,
    SamplingInputs,
    SamplingMethod,
)

__all__ = [
    "SamplingStrategy",
    "SamplingMethod",
    "SampleType",
    "InputKind",
    "SamplingInputs",
    "get_available_methods",
    "get_sampling_strategy",
    "spatial_sample",
]
