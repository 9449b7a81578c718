import dataclasses

import numpy as np
import pytest

from models import Volume, voxel_index
from tests.conftest import make_index_volume


def test_volume_dimensions_and_defaults(index_volume):
    assert (index_volume.width, index_volume.height, index_volume.depth) == (4, 3, 2)
    assert index_volume.voxels.size == 24
    assert index_volume.voxel_count == 24
    assert index_volume.shape == (2, 3, 4)
    assert index_volume.origin == (0.0, 0.0, 0.0)
    assert index_volume.window_center == 40.0
    assert index_volume.window_width == 400.0
    assert index_volume.rescale_slope == 1.0
    assert index_volume.rescale_intercept == 0.0


def test_voxel_value_uses_row_major_index(index_volume):
    assert index_volume.voxel_value(0, 0, 0) == 0
    assert index_volume.voxel_value(3, 0, 0) == 3
    assert index_volume.voxel_value(0, 1, 0) == 4
    assert index_volume.voxel_value(0, 0, 1) == 12
    assert index_volume.voxel_value(3, 2, 1) == 23
    for z in range(2):
        for y in range(3):
            for x in range(4):
                assert index_volume.voxel_value(x, y, z) == voxel_index(x, y, z, 4, 3)


@pytest.mark.parametrize(
    "coords",
    [(-1, 0, 0), (0, -1, 0), (0, 0, -1), (4, 0, 0), (0, 3, 0), (0, 0, 2), (100, 100, 100)],
)
def test_voxel_value_out_of_bounds_returns_none(index_volume, coords):
    assert index_volume.voxel_value(*coords) is None


def test_array_view_matches_flat_addressing(index_volume):
    arr = index_volume.array
    assert arr.shape == (2, 3, 4)
    assert arr[1, 2, 3] == index_volume.voxels[voxel_index(3, 2, 1, 4, 3)]


def test_physical_size_with_anisotropic_spacing():
    volume = make_index_volume(width=5, height=4, depth=3, spacing=(0.5, 0.75, 2.0))
    sx, sy, sz = volume.physical_size
    assert sx == pytest.approx(2.5)
    assert sy == pytest.approx(3.0)
    assert sz == pytest.approx(6.0)


def test_physical_position_offsets_from_origin():
    volume = make_index_volume(spacing=(0.5, 0.5, 2.0), origin=(-10.0, 5.0, 100.0))
    assert volume.physical_position(2, 1, 1) == pytest.approx((-9.0, 5.5, 102.0))


def test_volume_copies_and_freezes_input_buffer():
    source = np.arange(8, dtype=np.float32)
    volume = Volume(source, 2, 2, 2, 1.0, 1.0, 1.0)
    source[0] = 99
    assert volume.voxel_value(0, 0, 0) == 0
    assert not volume.voxels.flags.writeable
    with pytest.raises(ValueError):
        volume.voxels[0] = 1
    with pytest.raises(dataclasses.FrozenInstanceError):
        volume.width = 3


def test_identical_volumes_are_distinct_entities():
    a = make_index_volume()
    b = make_index_volume()
    assert a != b
    assert a.id != b.id
    assert a == a


def test_from_array_reads_zyx_layout():
    array = np.arange(24, dtype=np.float32).reshape(2, 3, 4)
    volume = Volume.from_array(array, spacing=(0.5, 0.6, 1.5), window_center=12.0)
    assert (volume.width, volume.height, volume.depth) == (4, 3, 2)
    assert (volume.spacing_x, volume.spacing_y, volume.spacing_z) == (0.5, 0.6, 1.5)
    assert volume.voxel_value(3, 2, 1) == 23
    assert volume.window_center == 12.0


def test_from_array_rejects_non_3d():
    with pytest.raises(ValueError):
        Volume.from_array(np.zeros((3, 3)))


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(voxels=np.zeros(5), width=2, height=2, depth=2),
        dict(voxels=np.zeros(0), width=-1, height=2, depth=2),
        dict(voxels=np.zeros(8), width=2, height=2, depth=2, spacing_x=0.0),
        dict(voxels=np.zeros(8), width=2, height=2, depth=2, spacing_z=-1.0),
    ],
)
def test_invalid_volume_rejected(kwargs):
    params = dict(spacing_x=1.0, spacing_y=1.0, spacing_z=1.0)
    params.update(kwargs)
    with pytest.raises(ValueError):
        Volume(**params)


def test_degenerate_volume_is_representable():
    volume = Volume(np.zeros(0), 0, 3, 2, 1.0, 1.0, 1.0)
    assert volume.voxel_count == 0
    assert volume.voxel_value(0, 0, 0) is None
