"""Sampling service: the spatial_sample entry point.

This module validates method/type/argument combinations, prepares the input
(missing-value policy and raster-to-table conversion), routes it to the
matching sampling strategy and shapes the output.
"""

import logging
import numbers
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence, Type, Union

import pandas as pd

from rastersample.errors import InvalidArgument
from rastersample.sampling.balanced import (
    BalancedSamplingStrategy,
    BalancedStratifiedSamplingStrategy,
)
from rastersample.sampling.base import SamplingStrategy
from rastersample.sampling.biased import BiasedSamplingStrategy
from rastersample.sampling.clh import ClhSamplingStrategy
from rastersample.sampling.simple import RandomSamplingStrategy
from rastersample.sampling.stratified import StratifiedSamplingStrategy
from rastersample.sampling.transect import TransectSamplingStrategy
from rastersample.sampling.types import (
    InputKind,
    SampleType,
    SamplingInputs,
    SamplingMethod,
)
from rastersample.scripts.engines import SamplingEngines
from rastersample.scripts.parameter import cell_column
from rastersample.scripts.raster import Raster

logger = logging.getLogger("rastersample.sampling.service")

# Registry of point sampling strategies
_STRATEGY_REGISTRY: Dict[SamplingMethod, Type[SamplingStrategy]] = {
    SamplingMethod.RANDOM: RandomSamplingStrategy,
    SamplingMethod.BIASED: BiasedSamplingStrategy,
    SamplingMethod.STRATIFIED: StratifiedSamplingStrategy,
    SamplingMethod.CLH: ClhSamplingStrategy,
    SamplingMethod.BALANCED: BalancedSamplingStrategy,
    SamplingMethod.BALANCED_STRATIFIED: BalancedStratifiedSamplingStrategy,
}

# Cached strategy instances
_strategy_instances: Dict[SamplingMethod, SamplingStrategy] = {}
_transect_strategy = TransectSamplingStrategy()


def get_sampling_strategy(
    method: Union[str, SamplingMethod],
    sample_type: Union[str, SampleType] = SampleType.POINT,
) -> SamplingStrategy:
    """Get the sampling strategy for a method and sample type.

    Args:
        method: The sampling method
        sample_type: "point" or "line"; every line method shares one strategy

    Returns:
        The corresponding SamplingStrategy instance

    Raises:
        InvalidArgument: If the method or sample type is unknown
    """
    method = SamplingMethod.from_string(method)
    if SampleType.from_string(sample_type) is SampleType.LINE:
        return _transect_strategy

    # Use cached instance if available
    if method not in _strategy_instances:
        _strategy_instances[method] = _STRATEGY_REGISTRY[method]()

    return _strategy_instances[method]


def get_available_methods() -> list:
    """Get list of available sampling methods.

    Returns:
        List of (method_value, display_name, description) tuples
    """
    methods = []
    for method in SamplingMethod:
        strategy = get_sampling_strategy(method)
        methods.append((method.value, strategy.display_name, strategy.description))
    return methods


def validate_dispatch(inputs: SamplingInputs) -> List[str]:
    """Check the input kind, method and sample type go together.

    Args:
        inputs: Sampling inputs to validate

    Returns:
        List of validation error messages, in checking order
    """
    errors = []

    if isinstance(inputs.n, bool) or not isinstance(inputs.n, numbers.Integral) or inputs.n < 1:
        errors.append(f"`n` must be a positive integer, got {inputs.n!r}")

    if inputs.method.is_balanced:
        if not inputs.is_gridded:
            errors.append(
                "if `method` is 'balanced' or 'balanced-stratified', then x must be a Raster"
            )
        if inputs.method is SamplingMethod.BALANCED_STRATIFIED and inputs.strata_var is None:
            errors.append(
                "if `method` is 'balanced-stratified', then `strata_var` must be specified"
            )

    if inputs.sample_type is SampleType.LINE:
        if not inputs.is_gridded:
            errors.append("if `type` is 'line', then x must be a Raster")
        if inputs.method not in TransectSamplingStrategy.supported_methods:
            errors.append(
                "if `type` is 'line', then `method` must be either 'random' or 'balanced'"
            )

    return errors


def prepare_inputs(inputs: SamplingInputs, strategy: SamplingStrategy) -> SamplingInputs:
    """Apply the missing-value policy and build the candidate records.

    Rasters lose every cell missing in any band when ``drop_na``; tables lose
    incomplete rows. Strategies sampling records get the raster as a table
    with a ``cell`` column.

    Args:
        inputs: Validated sampling inputs
        strategy: Strategy that will draw the sample

    Returns:
        New SamplingInputs with data and candidates prepared
    """
    data = inputs.data
    candidates = None

    if inputs.is_gridded:
        if inputs.drop_na:
            data = data.mask_incomplete()
        if strategy.uses_candidates:
            candidates = data.to_frame(cells=True, na_rm=inputs.drop_na)
    else:
        data = data.dropna() if inputs.drop_na else data
        candidates = data

    if candidates is not None:
        logger.debug(f"{len(candidates)} candidate records after NA handling")
    return replace(inputs, data=data, candidates=candidates)


def spatial_sample(
    x: Union[pd.DataFrame, Raster],
    n: int,
    method: Union[str, SamplingMethod],
    bias_var: Optional[str] = None,
    bias_thresh: Optional[float] = None,
    clh_var: Optional[Sequence[str]] = None,
    clh_iter: Optional[int] = None,
    strata_var: Optional[Union[str, Sequence[str]]] = None,
    drop_na: bool = True,
    as_raster: bool = False,
    type: Union[str, SampleType] = "point",
    control: Optional[Dict[str, Any]] = None,
    engines: Optional[SamplingEngines] = None,
) -> Union[pd.DataFrame, Raster]:
    """Take a sample (without replacement) of a table or raster.

    Methods:
        * "random": simple random sampling
        * "biased": random sampling of records whose ``bias_var`` value is
          greater than ``bias_thresh``
        * "stratified": ceil(n / number of strata) records for each value of
          ``strata_var``
        * "clh": conditioned Latin hypercube sampling over ``clh_var``
        * "balanced": spatially balanced sampling (raster only)
        * "balanced-stratified": spatially balanced sampling with equal
          inclusion mass per stratum of ``strata_var`` (raster only)

    Args:
        x: A DataFrame or Raster
        n: Sample size (number of transects when ``type`` is "line")
        method: Sampling method, see above
        bias_var: Field used by "biased"
        bias_thresh: Threshold used by "biased"
        clh_var: At least two fields used by "clh"
        clh_iter: Iterations of the cLHS optimisation
        strata_var: Field(s) defining strata for "stratified" and the
            balanced methods
        drop_na: Exclude records or cells with missing values
        as_raster: For raster input, return a Raster holding only the
            sampled cells
        type: "point" (default) or "line" (transects, raster only, with
            "random" or "balanced")
        control: Transect options passed to the transect engine
        engines: Sampling engines, defaults to SamplingEngines()

    Returns:
        The sampled records as a DataFrame, or a Raster when ``as_raster``
        and x is a Raster. Balanced methods may return slightly more or
        fewer than ``n`` records.

    Raises:
        InvalidArgument: If the arguments do not fit together
        InsufficientData: If there are fewer eligible records than ``n``
        ExternalEngineFailure: If a sampling engine fails
    """
    inputs = SamplingInputs(
        data=x,
        kind=InputKind.of(x),
        n=n,
        method=SamplingMethod.from_string(method),
        sample_type=SampleType.from_string(type),
        drop_na=drop_na,
        as_raster=as_raster,
        engines=engines or SamplingEngines(),
        bias_var=bias_var,
        bias_thresh=bias_thresh,
        clh_var=clh_var,
        clh_iter=clh_iter,
        strata_var=strata_var,
        control=control,
    )

    errors = validate_dispatch(inputs)
    if errors:
        raise InvalidArgument("; ".join(errors))

    strategy = get_sampling_strategy(inputs.method, inputs.sample_type)
    errors = strategy.validate_inputs(inputs)
    if errors:
        raise InvalidArgument("; ".join(errors))

    logger.info(
        f"Sampling {inputs.n} {inputs.sample_type.value}(s) from {inputs.kind.value} "
        f"input with {strategy.display_name}"
    )
    inputs = prepare_inputs(inputs, strategy)
    samples = strategy.sample(inputs)

    if inputs.is_gridded and inputs.as_raster:
        return inputs.data.keep_cells(samples[cell_column])
    return samples
