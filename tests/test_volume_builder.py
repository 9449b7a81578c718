import numpy as np
import pytest

from core.errors import (
    InconsistentDimensionsError,
    InsufficientSlicesError,
    MissingPixelDataError,
    VolumeBuildError,
)
from core.volume_builder import build_volume, load_volume, slice_z
from tests.conftest import make_dataset


def _plane(value, rows=2, cols=3):
    return np.full((rows, cols), value)


def test_build_volume_sorts_by_position_and_rescales():
    datasets = [
        make_dataset(5.0, _plane(30), slope=2.0, intercept=-1024.0),
        make_dataset(0.0, _plane(10), slope=2.0, intercept=-1024.0, PixelSpacing=[0.7, 0.5],
                     WindowCenter=50, WindowWidth=350),
        make_dataset(2.5, _plane(20), slope=2.0, intercept=-1024.0),
    ]
    volume = build_volume(datasets)
    assert (volume.width, volume.height, volume.depth) == (3, 2, 3)
    assert volume.voxel_value(0, 0, 0) == 10 * 2.0 - 1024.0
    assert volume.voxel_value(2, 1, 1) == 20 * 2.0 - 1024.0
    assert volume.voxel_value(1, 1, 2) == 30 * 2.0 - 1024.0
    assert volume.spacing_x == pytest.approx(0.5)
    assert volume.spacing_y == pytest.approx(0.7)
    assert volume.spacing_z == pytest.approx(2.5)
    assert volume.origin == pytest.approx((-20.0, 10.0, 0.0))
    assert volume.rescale_slope == 2.0
    assert volume.rescale_intercept == -1024.0
    assert volume.window_center == 50.0
    assert volume.window_width == 350.0


def test_build_volume_defaults_when_tags_missing():
    volume = build_volume([make_dataset(0.0, _plane(1)), make_dataset(1.0, _plane(2))])
    assert volume.window_center == 40.0
    assert volume.window_width == 400.0
    assert (volume.spacing_x, volume.spacing_y) == (1.0, 1.0)
    assert volume.spacing_z == pytest.approx(1.0)


def test_multi_valued_window_uses_first_value():
    first = make_dataset(0.0, _plane(1), WindowCenter=[40, 400], WindowWidth=[400, 2000])
    volume = build_volume([first, make_dataset(1.0, _plane(2))])
    assert (volume.window_center, volume.window_width) == (40.0, 400.0)


def test_coincident_positions_use_minimum_spacing():
    volume = build_volume([make_dataset(3.0, _plane(1)), make_dataset(3.0, _plane(2))])
    assert volume.spacing_z == pytest.approx(0.001)


def test_slice_location_fallback():
    a = make_dataset(0.0, _plane(1), with_position=False, SliceLocation=8.0)
    b = make_dataset(0.0, _plane(2), with_position=False, SliceLocation=-4.0)
    assert slice_z(a) == 8.0
    volume = build_volume([a, b])
    assert volume.voxel_value(0, 0, 0) == 2
    assert volume.spacing_z == pytest.approx(12.0)
    assert volume.origin == pytest.approx((0.0, 0.0, -4.0))


def test_requires_two_slices():
    with pytest.raises(InsufficientSlicesError):
        build_volume([make_dataset(0.0, _plane(1))])
    with pytest.raises(InsufficientSlicesError):
        build_volume([])


def test_rejects_inconsistent_dimensions():
    with pytest.raises(InconsistentDimensionsError):
        build_volume([make_dataset(0.0, _plane(1)), make_dataset(1.0, _plane(1, rows=3))])


def test_rejects_missing_pixel_data():
    broken = make_dataset(1.0, _plane(1))
    del broken.PixelData
    with pytest.raises(MissingPixelDataError):
        build_volume([make_dataset(0.0, _plane(1)), broken])


def test_rejects_missing_dimensions():
    first = make_dataset(0.0, _plane(1))
    del first.Rows
    with pytest.raises(VolumeBuildError):
        build_volume([first, make_dataset(1.0, _plane(1))])


@pytest.mark.parametrize("spacing", [[0, 0], [-0.5, 0.7]])
def test_rejects_non_positive_pixel_spacing(spacing):
    datasets = [
        make_dataset(0.0, _plane(1), PixelSpacing=spacing),
        make_dataset(1.0, _plane(2), PixelSpacing=spacing),
    ]
    with pytest.raises(VolumeBuildError):
        build_volume(datasets)


def test_load_volume_from_empty_directory(tmp_path):
    with pytest.raises(VolumeBuildError):
        load_volume(tmp_path)
