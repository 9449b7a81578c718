import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import numpy as np
import pytest
from pydicom.dataset import Dataset, FileMetaDataset
from pydicom.uid import ExplicitVRLittleEndian

from models import Volume


def make_index_volume(width=4, height=3, depth=2, spacing=(0.5, 0.5, 1.0), **kwargs) -> Volume:
    """voxel(x, y, z) = z * width * height + y * width + x"""
    count = width * height * depth
    return Volume(
        voxels=np.arange(count, dtype=np.float32),
        width=width,
        height=height,
        depth=depth,
        spacing_x=spacing[0],
        spacing_y=spacing[1],
        spacing_z=spacing[2],
        **kwargs,
    )


def make_stack_volume(slices, width=2, height=2) -> Volume:
    """由逐层 (z 主序) 的数值列表构建体数据。"""
    voxels = np.concatenate([np.asarray(s, dtype=np.float32) for s in slices])
    return Volume(
        voxels=voxels,
        width=width,
        height=height,
        depth=len(slices),
        spacing_x=1.0,
        spacing_y=1.0,
        spacing_z=1.0,
    )


def make_dataset(z, pixels, slope=1.0, intercept=0.0, with_position=True, **attrs) -> Dataset:
    pixels = np.asarray(pixels, dtype=np.int16)
    ds = Dataset()
    ds.file_meta = FileMetaDataset()
    ds.file_meta.TransferSyntaxUID = ExplicitVRLittleEndian
    ds.Rows, ds.Columns = pixels.shape
    ds.SamplesPerPixel = 1
    ds.PhotometricInterpretation = "MONOCHROME2"
    ds.BitsAllocated = 16
    ds.BitsStored = 16
    ds.HighBit = 15
    ds.PixelRepresentation = 1
    ds.RescaleSlope = slope
    ds.RescaleIntercept = intercept
    if with_position:
        ds.ImagePositionPatient = [-20.0, 10.0, z]
    ds.PixelData = pixels.tobytes()
    for key, value in attrs.items():
        setattr(ds, key, value)
    return ds


@pytest.fixture
def index_volume() -> Volume:
    return make_index_volume()


@pytest.fixture
def qapp():
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app
