import numpy as np
import pandas as pd
import pytest
from rasterio.transform import from_bounds

from rastersample import InvalidArgument, Raster


def test_default_names_and_shape(grid):
    assert grid.names == ["lyr.1"]
    assert (grid.nlyr, grid.nrow, grid.ncol, grid.ncell) == (1, 10, 10, 100)


def test_cells_are_one_based_row_major(grid):
    df = grid.to_frame()

    assert df["cell"].tolist() == list(range(1, 101))
    # values equal the cell ids, cell 11 opens the second row
    assert grid.values[0, 1, 0] == 11
    assert df.loc[df["cell"] == 11, "lyr.1"].item() == 11


def test_cell_centres_on_default_extent(grid):
    xs, ys = grid.xy([1, 100])

    assert xs.tolist() == pytest.approx([-162.0, 162.0])
    assert ys.tolist() == pytest.approx([81.0, -81.0])


def test_cell_from_xy_inverts_xy(grid):
    xs, ys = grid.xy(grid.cells())

    assert grid.cell_from_xy(xs, ys).tolist() == list(range(1, 101))


def test_cell_from_xy_off_grid_is_missing(grid):
    cells = grid.cell_from_xy([0.0, 500.0, np.nan], [0.0, 0.0, 0.0])

    assert not pd.isna(cells[0])
    assert pd.isna(cells[1])
    assert pd.isna(cells[2])


def test_to_frame_drops_incomplete_cells(grid_with_na):
    df = grid_with_na.to_frame()

    assert len(df) == 80
    assert df["cell"].min() == 21
    assert len(grid_with_na.to_frame(na_rm=False)) == 100


def test_to_frame_with_coordinates(grid):
    df = grid.to_frame(cells=False, xy=True)

    assert list(df.columns) == ["x", "y", "lyr.1"]
    assert df.loc[0, "x"] == pytest.approx(-162.0)


def test_mask_incomplete_spreads_missing_to_all_bands(strata_grid):
    values = strata_grid.values.copy()
    values[1, 0, 4] = np.nan
    masked = Raster(values, strata_grid.names).mask_incomplete()

    assert np.isnan(masked.values[0, 0, 4])
    assert int(np.isnan(masked.values).sum()) == 2


def test_extract_returns_missing_for_missing_cells(grid):
    values = grid.extract(pd.array([5, None, 42], dtype="Int64"))

    assert values["lyr.1"].iloc[0] == 5
    assert np.isnan(values["lyr.1"].iloc[1])
    assert values["lyr.1"].iloc[2] == 42


def test_keep_cells_masks_everything_else(grid):
    kept = grid.keep_cells([3, 50, 77])

    assert int((~np.isnan(kept.values)).sum()) == 3
    assert sorted(kept.to_frame()["cell"]) == [3, 50, 77]
    assert int(np.isnan(grid.values).sum()) == 0


def test_set_values_in_place(grid):
    grid.set_values([1, 2], [0.5, 0.25])

    assert grid.values[0, 0, :2].tolist() == [0.5, 0.25]


def test_band_lookup(strata_grid):
    assert strata_grid.band_index("strata") == 1
    assert strata_grid.subset("strata").names == ["strata"]
    with pytest.raises(InvalidArgument, match="not found"):
        strata_grid.band_index("elevation")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"values": np.zeros((2, 3, 3)), "names": ["a"]},
        {"values": np.zeros((2, 3, 3)), "names": ["a", "a"]},
        {"values": np.zeros(9)},
    ],
)
def test_invalid_construction(kwargs):
    with pytest.raises(InvalidArgument):
        Raster(**kwargs)


def test_out_of_range_cells_are_rejected(grid):
    with pytest.raises(InvalidArgument):
        grid.xy([0])
    with pytest.raises(InvalidArgument):
        grid.extract([101])


def test_file_round_trip(tmp_path, strata_grid):
    values = strata_grid.values.copy()
    values[0, 2, 3] = np.nan
    source = Raster(
        values,
        strata_grid.names,
        transform=from_bounds(0, 0, 1000, 1000, 10, 10),
        crs="EPSG:3857",
    )
    path = tmp_path / "grid.tif"

    source.to_file(str(path))
    loaded = Raster.from_file(str(path))

    assert loaded.names == ["values", "strata"]
    assert loaded.crs.to_epsg() == 3857
    assert loaded.transform == source.transform
    assert np.isnan(loaded.values[0, 2, 3])
    np.testing.assert_array_equal(
        np.nan_to_num(loaded.values, nan=-1), np.nan_to_num(values, nan=-1)
    )


def test_from_file_band_selection(tmp_path, strata_grid):
    path = tmp_path / "grid.tif"
    strata_grid.to_file(str(path))

    loaded = Raster.from_file(str(path), bands=[2])

    assert loaded.names == ["strata"]
    assert loaded.nlyr == 1
