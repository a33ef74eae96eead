import re

import numpy as np
import pandas as pd
import pytest

from rastersample import (
    InsufficientData,
    InvalidArgument,
    Raster,
    SampleType,
    SamplingMethod,
    get_available_methods,
    get_sampling_strategy,
    spatial_sample,
    stratify,
)


# --- Tabular input ---


def test_random_table(frame):
    result = spatial_sample(frame, n=10, method="random")

    assert isinstance(result, pd.DataFrame)
    assert len(result) == 10
    assert list(result.columns) == list(frame.columns)
    assert result.index.is_unique


def test_biased_table(frame):
    result = spatial_sample(frame, n=5, method="biased", bias_var="x", bias_thresh=90)

    assert len(result) == 5
    assert (result["x"] > 90).all()


def test_stratified_table(frame):
    result = spatial_sample(frame, n=25, method="stratified", strata_var="strata")

    assert len(result) == 25
    assert result["strata"].value_counts().min() >= 5


def test_clh_table(frame):
    result = spatial_sample(frame, n=8, method="clh", clh_var=["x", "y"], clh_iter=100)

    assert len(result) == 8
    assert result.index.is_unique


def test_table_rows_with_missing_values_are_dropped(frame):
    frame.loc[frame["x"] <= 50, "y"] = np.nan

    result = spatial_sample(frame, n=50, method="random")

    assert result["x"].min() > 50
    with pytest.raises(InsufficientData):
        spatial_sample(frame, n=51, method="random")
    assert len(spatial_sample(frame, n=51, method="random", drop_na=False)) == 51


def test_as_raster_is_ignored_for_tables(frame):
    result = spatial_sample(frame, n=3, method="random", as_raster=True)

    assert isinstance(result, pd.DataFrame)


def test_method_enum_is_accepted(frame):
    assert len(spatial_sample(frame, n=3, method=SamplingMethod.RANDOM)) == 3


# --- Raster input ---


def test_random_raster(grid):
    result = spatial_sample(grid, n=10, method="random")

    assert len(result) == 10
    assert result["cell"].is_unique
    assert result["cell"].between(1, 100).all()
    # cell values equal their ids
    assert (result["lyr.1"] == result["cell"]).all()


def test_biased_raster(grid):
    result = spatial_sample(grid, n=5, method="biased", bias_var="lyr.1", bias_thresh=80)

    assert len(result) == 5
    assert (result["lyr.1"] > 80).all()


def test_stratified_raster_on_stratify_output(grid):
    strata = stratify(grid, n_strata=4)
    r = Raster(np.concatenate([grid.values, strata.values]), ["lyr.1", "lyr.1_strata"])

    result = spatial_sample(r, n=8, method="stratified", strata_var="lyr.1_strata")

    assert result["lyr.1_strata"].value_counts().to_dict() == {1.0: 2, 2.0: 2, 3.0: 2, 4.0: 2}


def test_raster_missing_cells_are_never_sampled(grid_with_na):
    result = spatial_sample(grid_with_na, n=80, method="random")

    assert result["cell"].min() > 20
    assert result["lyr.1"].notna().all()
    with pytest.raises(InsufficientData):
        spatial_sample(grid_with_na, n=81, method="random")


def test_incomplete_cells_are_dropped_in_every_band(strata_grid):
    values = strata_grid.values.copy()
    values[1, 9, :] = np.nan
    r = Raster(values, strata_grid.names)

    result = spatial_sample(r, n=90, method="random")

    assert result["cell"].max() <= 90


def test_as_raster_keeps_only_sampled_cells(grid):
    result = spatial_sample(grid, n=10, method="random", as_raster=True)

    assert isinstance(result, Raster)
    assert (result.nrow, result.ncol) == (10, 10)
    assert int((~np.isnan(result.values)).sum()) == 10


def test_balanced_raster(grid):
    result = spatial_sample(grid, n=10, method="balanced")

    assert 0 < len(result) <= 10
    assert result["cell"].is_unique


def test_balanced_stratified_raster(strata_grid):
    result = spatial_sample(strata_grid, n=25, method="balanced-stratified", strata_var="strata")

    assert 0 < len(result) <= 25
    assert set(result["strata"]) <= {1.0, 2.0, 3.0, 4.0, 5.0}


def test_balanced_uses_injected_engine(grid_with_na, recorder):
    calls, engines = recorder

    result = spatial_sample(grid_with_na, n=4, method="balanced", engines=engines)

    assert result["cell"].tolist() == [21, 22, 23, 24]
    assert calls["quasi"]["dimension"] == 2


def test_balanced_as_raster(grid, recorder):
    _, engines = recorder

    result = spatial_sample(grid, n=4, method="balanced", as_raster=True, engines=engines)

    assert sorted(result.to_frame()["cell"]) == [1, 2, 3, 4]


def test_clh_raster_uses_injected_engine(strata_grid, recorder):
    calls, engines = recorder

    result = spatial_sample(
        strata_grid, n=3, method="clh", clh_var=["values", "strata"], engines=engines
    )

    assert calls["clh"]["iterations"] == 10000
    assert result["cell"].tolist() == [1, 2, 3]


# --- Line transects ---


@pytest.mark.parametrize("method", ["random", "balanced"])
def test_line_transects(method):
    r = Raster(np.arange(400, dtype="float64").reshape(20, 20))

    result = spatial_sample(r, n=3, method=method, type="line")

    assert {"transect", "x", "y", "cell", "lyr.1"} <= set(result.columns)
    assert set(result["transect"]) == {1, 2, 3}
    assert len(result) == 30
    assert result["cell"].notna().any()


def test_line_control_reaches_engine(grid, recorder):
    calls, engines = recorder

    spatial_sample(
        grid, n=2, method="random", type=SampleType.LINE, control={"n_points": 4}, engines=engines
    )

    assert calls["transect"]["control"] == {
        "pattern": "line",
        "randomness_mode": "pseudo",
        "n_points": 4,
    }


# --- Validation ---


@pytest.mark.parametrize(
    "x_fixture, kwargs, message",
    [
        ("frame", {"method": "balanced"}, "x must be a Raster"),
        ("frame", {"method": "balanced-stratified", "strata_var": "strata"}, "x must be a Raster"),
        ("grid", {"method": "balanced-stratified"}, "`strata_var` must be specified"),
        ("frame", {"method": "random", "type": "line"}, "if `type` is 'line', then x must be a Raster"),
        (
            "grid",
            {"method": "stratified", "strata_var": "lyr.1", "type": "line"},
            "`method` must be either 'random' or 'balanced'",
        ),
        ("grid", {"method": "clh", "clh_var": ["lyr.1"], "type": "line"}, "either 'random' or 'balanced'"),
        ("frame", {"method": "biased", "bias_thresh": 1}, "`bias_var` must be specified"),
        ("frame", {"method": "biased", "bias_var": "x"}, "`bias_thresh` must be specified"),
        ("frame", {"method": "biased", "bias_var": "z", "bias_thresh": 1}, "not found"),
        ("frame", {"method": "stratified"}, "`strata_var` must be specified"),
        ("frame", {"method": "clh", "clh_var": ["x"]}, "at least two fields"),
        ("frame", {"method": "clh", "clh_var": ["x", "y"], "clh_iter": 0}, "`clh_iter`"),
        ("frame", {"method": "systematic"}, "Unknown sampling method"),
        ("frame", {"method": "random", "type": "polygon"}, "Unknown sample type"),
    ],
)
def test_invalid_arguments(request, x_fixture, kwargs, message):
    x = request.getfixturevalue(x_fixture)

    with pytest.raises(InvalidArgument, match=re.escape(message)):
        spatial_sample(x, n=5, **kwargs)


@pytest.mark.parametrize("n", [0, -3, 2.5, True])
def test_sample_size_must_be_positive_integer(frame, n):
    with pytest.raises(InvalidArgument, match="`n` must be a positive integer"):
        spatial_sample(frame, n=n, method="random")


def test_numpy_integer_sample_size(frame):
    assert len(spatial_sample(frame, n=np.int64(4), method="random")) == 4


def test_unsupported_input_type():
    with pytest.raises(InvalidArgument, match="DataFrame or a Raster"):
        spatial_sample([1, 2, 3], n=1, method="random")


def test_validation_happens_before_any_engine_call(frame, recorder):
    calls, engines = recorder

    with pytest.raises(InvalidArgument):
        spatial_sample(frame, n=5, method="clh", clh_var=["x", "missing"], engines=engines)
    assert calls == {}


def test_all_dispatch_errors_are_reported(frame):
    with pytest.raises(InvalidArgument) as info:
        spatial_sample(frame, n=5, method="balanced-stratified", type="line")

    message = str(info.value)
    assert "x must be a Raster" in message
    assert "`strata_var` must be specified" in message
    assert "either 'random' or 'balanced'" in message


# --- Strategy registry ---


def test_strategy_lookup():
    assert get_sampling_strategy("clh").method is SamplingMethod.CLH
    assert get_sampling_strategy("random", "line").sample_type is SampleType.LINE
    assert get_sampling_strategy("balanced").requires_raster


def test_available_methods():
    methods = get_available_methods()

    assert [m[0] for m in methods] == [
        "random",
        "biased",
        "stratified",
        "clh",
        "balanced",
        "balanced-stratified",
    ]
    assert all(name and description for _, name, description in methods)
