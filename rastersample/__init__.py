"""rastersample: stratification and spatial sampling of tables and rasters."""

from rastersample.errors import (
    ExternalEngineFailure,
    InsufficientData,
    InvalidArgument,
    RasterSampleError,
)
from rastersample.sampling import (
    SampleType,
    SamplingMethod,
    get_available_methods,
    get_sampling_strategy,
    spatial_sample,
)
from rastersample.scripts import (
    Raster,
    SamplingEngines,
    samples_to_points,
    setup_logging,
    stratify,
    transects_to_lines,
)

__version__ = "0.1.0"

__all__ = [
    "Raster",
    "SamplingEngines",
    "SampleType",
    "SamplingMethod",
    "RasterSampleError",
    "InvalidArgument",
    "InsufficientData",
    "ExternalEngineFailure",
    "get_available_methods",
    "get_sampling_strategy",
    "samples_to_points",
    "setup_logging",
    "spatial_sample",
    "stratify",
    "transects_to_lines",
]
