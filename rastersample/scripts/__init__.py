"""rastersample scripts package.

Contains the raster abstraction, stratification, the sampling adapters and
their default engines.
"""

from .balanced import inclusion_surface, sample_balanced
from .engines import SamplingEngines, clhs, quasi_sample, transect_sample
from .geometry import samples_to_points, transects_to_lines
from .hypercube import sample_clh
from .logger import setup_logging
from .raster import Raster
from .stratification import stratify
from .tabular import sample_biased, sample_random, sample_stratified
from .transect import candidate_lattice, sample_transect

__all__ = [
    # Raster
    "Raster",
    # Stratification
    "stratify",
    # Record sampling
    "sample_random",
    "sample_biased",
    "sample_stratified",
    # Adapters
    "sample_clh",
    "inclusion_surface",
    "sample_balanced",
    "candidate_lattice",
    "sample_transect",
    # Engines
    "SamplingEngines",
    "clhs",
    "quasi_sample",
    "transect_sample",
    # Output and logging
    "samples_to_points",
    "transects_to_lines",
    "setup_logging",
]
