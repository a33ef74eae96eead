"""Type definitions for sampling strategies.

Contains the enums and the input data class shared by all sampling methods.
This provides a clear contract between the dispatcher and the strategies.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

import pandas as pd

from rastersample.errors import InvalidArgument
from rastersample.scripts.engines import SamplingEngines
from rastersample.scripts.raster import Raster


class SamplingMethod(Enum):
    """Available sampling methods."""

    RANDOM = "random"
    BIASED = "biased"
    STRATIFIED = "stratified"
    CLH = "clh"
    BALANCED = "balanced"
    BALANCED_STRATIFIED = "balanced-stratified"

    @classmethod
    def from_string(cls, value: Union[str, "SamplingMethod"]) -> "SamplingMethod":
        """Convert string to SamplingMethod enum."""
        if isinstance(value, cls):
            return value
        for method in cls:
            if method.value == str(value).lower():
                return method
        raise InvalidArgument(
            f"Unknown sampling method: {value} "
            f"(expected one of {[m.value for m in cls]})"
        )

    @property
    def is_balanced(self) -> bool:
        return self in (SamplingMethod.BALANCED, SamplingMethod.BALANCED_STRATIFIED)


class SampleType(Enum):
    """Shape of the sampled units."""

    POINT = "point"
    LINE = "line"

    @classmethod
    def from_string(cls, value: Union[str, "SampleType"]) -> "SampleType":
        """Convert string to SampleType enum."""
        if isinstance(value, cls):
            return value
        for sample_type in cls:
            if sample_type.value == str(value).lower():
                return sample_type
        raise InvalidArgument(f"Unknown sample type: {value} (expected 'point' or 'line')")


class InputKind(Enum):
    """Representation of the data handed to spatial_sample."""

    TABULAR = "tabular"
    GRIDDED = "gridded"

    @classmethod
    def of(cls, x: Any) -> "InputKind":
        if isinstance(x, Raster):
            return cls.GRIDDED
        if isinstance(x, pd.DataFrame):
            return cls.TABULAR
        raise InvalidArgument(
            f"x must be a pandas DataFrame or a Raster, got {type(x).__name__}"
        )


@dataclass
class SamplingInputs:
    """Input parameters for a sampling run.

    This is a unified input structure that contains all possible parameters.
    Each strategy will use only the parameters relevant to it.
    """

    # Common parameters
    data: Union[pd.DataFrame, Raster]
    kind: InputKind
    n: int
    method: SamplingMethod
    sample_type: SampleType = SampleType.POINT
    drop_na: bool = True
    as_raster: bool = False
    engines: SamplingEngines = field(default_factory=SamplingEngines)

    # Method-specific
    bias_var: Optional[str] = None
    bias_thresh: Optional[float] = None
    clh_var: Optional[Sequence[str]] = None
    clh_iter: Optional[int] = None
    strata_var: Optional[Union[str, Sequence[str]]] = None
    control: Optional[Dict[str, Any]] = None

    # Records to sample from, filled in by the dispatcher for tabular methods
    candidates: Optional[pd.DataFrame] = None

    @property
    def is_gridded(self) -> bool:
        return self.kind is InputKind.GRIDDED

    @property
    def field_names(self) -> List[str]:
        """Band names for a raster, column names for a table."""
        if self.is_gridded:
            return list(self.data.names)
        return list(self.data.columns)
