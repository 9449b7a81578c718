import numpy as np
import pytest

from core import mpr_engine
from models import MPRPlane, Volume
from tests.conftest import make_index_volume


def test_max_slice_index_per_plane(index_volume):
    assert mpr_engine.max_slice_index(MPRPlane.AXIAL, index_volume) == 1
    assert mpr_engine.max_slice_index(MPRPlane.SAGITTAL, index_volume) == 3
    assert mpr_engine.max_slice_index(MPRPlane.CORONAL, index_volume) == 2


def test_axial_slices_follow_flat_layout(index_volume):
    first = mpr_engine.extract_axial_slice(index_volume, 0)
    assert first.plane == MPRPlane.AXIAL
    assert first.index == 0
    assert (first.width, first.height) == (4, 3)
    assert first.pixel_data.tolist() == list(range(12))

    second = mpr_engine.extract_axial_slice(index_volume, 1)
    assert second.pixel_data[0] == 12
    assert second.pixel_data[11] == 23


def test_sagittal_slice_is_depth_by_height(index_volume):
    sagittal = mpr_engine.extract_sagittal_slice(index_volume, 0)
    assert sagittal.plane == MPRPlane.SAGITTAL
    assert (sagittal.width, sagittal.height) == (2, 3)
    # 行 y，列 z
    assert sagittal.pixel_data[0 * 2 + 1] == 12
    assert sagittal.pixel_data[2 * 2 + 1] == 20
    assert sagittal.pixel_data[1 * 2 + 0] == 4


def test_coronal_slice_is_width_by_depth(index_volume):
    coronal = mpr_engine.extract_coronal_slice(index_volume, 1)
    assert coronal.plane == MPRPlane.CORONAL
    assert (coronal.width, coronal.height) == (4, 2)
    # 行 z，列 x：voxel(x, 1, z)
    assert coronal.pixel_data.tolist() == [4, 5, 6, 7, 16, 17, 18, 19]


def test_output_spacing_follows_plane():
    volume = make_index_volume(spacing=(0.5, 0.75, 2.0))
    axial = mpr_engine.extract_axial_slice(volume, 0)
    sagittal = mpr_engine.extract_sagittal_slice(volume, 0)
    coronal = mpr_engine.extract_coronal_slice(volume, 0)
    assert (axial.pixel_spacing_x, axial.pixel_spacing_y) == (0.5, 0.75)
    assert (sagittal.pixel_spacing_x, sagittal.pixel_spacing_y) == (2.0, 0.75)
    assert (coronal.pixel_spacing_x, coronal.pixel_spacing_y) == (0.5, 2.0)


@pytest.mark.parametrize("plane", list(MPRPlane))
def test_slice_index_bounds(index_volume, plane):
    last = mpr_engine.max_slice_index(plane, index_volume)
    assert mpr_engine.extract_slice(index_volume, plane, 0) is not None
    assert mpr_engine.extract_slice(index_volume, plane, last) is not None
    assert mpr_engine.extract_slice(index_volume, plane, last + 1) is None
    assert mpr_engine.extract_slice(index_volume, plane, -1) is None


@pytest.mark.parametrize(
    "plane, extractor",
    [
        (MPRPlane.AXIAL, mpr_engine.extract_axial_slice),
        (MPRPlane.SAGITTAL, mpr_engine.extract_sagittal_slice),
        (MPRPlane.CORONAL, mpr_engine.extract_coronal_slice),
    ],
)
def test_extract_slice_dispatches_by_plane(index_volume, plane, extractor):
    generic = mpr_engine.extract_slice(index_volume, plane, 1)
    direct = extractor(index_volume, 1)
    assert generic.plane == direct.plane
    assert (generic.width, generic.height) == (direct.width, direct.height)
    np.testing.assert_array_equal(generic.pixel_data, direct.pixel_data)


def test_extract_slice_accepts_plane_name(index_volume):
    assert mpr_engine.extract_slice(index_volume, "coronal", 0).plane == MPRPlane.CORONAL


@pytest.mark.parametrize("plane", list(MPRPlane))
def test_repeated_extraction_is_byte_identical(index_volume, plane):
    first = mpr_engine.extract_slice(index_volume, plane, 1)
    second = mpr_engine.extract_slice(index_volume, plane, 1)
    assert first.pixel_data.tobytes() == second.pixel_data.tobytes()
    assert first.id != second.id


@pytest.mark.parametrize("plane", list(MPRPlane))
def test_slices_do_not_alias_volume(index_volume, plane):
    before = index_volume.voxels.copy()
    result = mpr_engine.extract_slice(index_volume, plane, 0)
    assert not np.shares_memory(result.pixel_data, index_volume.voxels)
    np.testing.assert_array_equal(index_volume.voxels, before)


def test_degenerate_volume_yields_no_slices():
    volume = Volume(np.zeros(0), 0, 3, 2, 1.0, 1.0, 1.0)
    for plane in MPRPlane:
        assert mpr_engine.extract_slice(volume, plane, 0) is None
    assert mpr_engine.max_slice_index(MPRPlane.SAGITTAL, volume) == -1


def test_slice_image_reshapes_to_rows_and_columns(index_volume):
    sagittal = mpr_engine.extract_sagittal_slice(index_volume, 3)
    image = sagittal.image
    assert image.shape == (3, 2)
    assert image[2, 1] == index_volume.voxel_value(3, 2, 1)
