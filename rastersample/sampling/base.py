"""Base class for sampling strategies.

Defines the interface that all sampling strategies must implement.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Union

import pandas as pd

from rastersample.sampling.types import SampleType, SamplingInputs, SamplingMethod

logger = logging.getLogger("rastersample.sampling")


class SamplingStrategy(ABC):
    """Abstract base class for sampling strategies.

    Each sampling method (random, biased, stratified, ...) implements this
    interface. This ensures consistent behavior and makes it easy to add new
    methods.
    """

    @property
    @abstractmethod
    def method(self) -> Optional[SamplingMethod]:
        """Return the sampling method this strategy handles."""
        pass

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable name for this sampling method."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Description of when to use this sampling method."""
        pass

    @property
    def sample_type(self) -> SampleType:
        """Shape of the sampled units."""
        return SampleType.POINT

    @property
    def requires_raster(self) -> bool:
        """Whether this method only works on a Raster."""
        return False

    @property
    def uses_candidates(self) -> bool:
        """Whether this method samples from the tabular form of the input."""
        return True

    @abstractmethod
    def validate_inputs(self, inputs: SamplingInputs) -> List[str]:
        """Validate inputs for this sampling method.

        Args:
            inputs: Sampling inputs to validate

        Returns:
            List of validation error messages (empty if valid)
        """
        pass

    @abstractmethod
    def sample(self, inputs: SamplingInputs) -> pd.DataFrame:
        """Draw the sample.

        Args:
            inputs: Validated sampling inputs, prepared by the dispatcher

        Returns:
            Sampled records
        """
        pass

    def is_ready(self, inputs: SamplingInputs) -> bool:
        """Check if inputs are ready for sampling.

        Args:
            inputs: Sampling inputs to check

        Returns:
            True if ready for sampling
        """
        errors = self.validate_inputs(inputs)
        return len(errors) == 0

    def _validate_fields(
        self,
        inputs: SamplingInputs,
        names: Union[str, Sequence[str]],
        argument: str,
    ) -> List[str]:
        """Check that every field named by ``argument`` exists in the input.

        Args:
            inputs: Sampling inputs to validate
            names: One field name or a list of them
            argument: Name of the argument, used in the message

        Returns:
            List of validation error messages
        """
        names = [names] if isinstance(names, str) else list(names)
        available = inputs.field_names
        unknown = [name for name in names if name not in available]
        if unknown:
            return [f"`{argument}` field(s) {unknown} not found in x (available: {available})"]
        return []
