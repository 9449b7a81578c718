# -*- coding: utf-8 -*-
"""
体数据拼装。
用 SimpleITK 查找 DICOM 序列文件、pydicom 读取各层，按 z 位置排序后拼成 Volume：
像素经各层 RescaleSlope/RescaleIntercept 变换为 HU，间距与原点取自 DICOM 几何标签。
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np
import pydicom
import SimpleITK as sitk
from pydicom.dataset import Dataset
from pydicom.multival import MultiValue

from config import DEFAULT_WINDOW_CENTER, DEFAULT_WINDOW_WIDTH
from core.errors import (
    InconsistentDimensionsError,
    InsufficientSlicesError,
    MissingPixelDataError,
    VolumeBuildError,
)
from models.volume import Volume

logger = logging.getLogger(__name__)

# 层间距下限 (mm)，避免重复位置导致间距为 0
MIN_SLICE_SPACING = 0.001


def _first_float(value, default: float) -> float:
    """DICOM 多值元素（如 WindowCenter）取第一个值。"""
    if value is None or value == "":
        return default
    if isinstance(value, (list, tuple, MultiValue)):
        if len(value) == 0:
            return default
        value = value[0]
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _position(ds: Dataset, axis: int) -> Optional[float]:
    ipp = getattr(ds, "ImagePositionPatient", None)
    if ipp is not None and len(ipp) == 3:
        return float(ipp[axis])
    return None


def slice_z(ds: Dataset) -> float:
    """层的 z 位置：优先 ImagePositionPatient，其次 SliceLocation，缺失为 0。"""
    z = _position(ds, 2)
    if z is not None:
        return z
    location = getattr(ds, "SliceLocation", None)
    return float(location) if location is not None else 0.0


def _pixel_spacing(ds: Dataset):
    """PixelSpacing 为 (行间距, 列间距)，缺失时均为 1.0。"""
    spacing = getattr(ds, "PixelSpacing", None)
    if spacing is not None and len(spacing) >= 2:
        return _first_float(spacing[0], 1.0), _first_float(spacing[1], 1.0)
    return 1.0, 1.0


def _rescaled_pixels(ds: Dataset) -> np.ndarray:
    if "PixelData" not in ds:
        raise MissingPixelDataError(str(getattr(ds, "SOPInstanceUID", "")))
    try:
        raw = ds.pixel_array
    except (AttributeError, ValueError, NotImplementedError) as e:
        raise MissingPixelDataError(str(e)) from e
    slope = _first_float(getattr(ds, "RescaleSlope", None), 1.0)
    intercept = _first_float(getattr(ds, "RescaleIntercept", None), 0.0)
    return raw.astype(np.float64) * slope + intercept


def build_volume(datasets: Sequence[Dataset]) -> Volume:
    """
    由同一序列的多层 DICOM 构建 Volume。
    - 至少 2 层，所有层 Rows/Columns 一致
    - 各层按自身 Rescale 变换；第一层提供记录用的 Rescale、窗宽窗位、PixelSpacing
    - 层间距 = |z_last - z_first| / (n - 1)，下限 MIN_SLICE_SPACING
    """
    if len(datasets) < 2:
        raise InsufficientSlicesError(len(datasets))

    ordered = sorted(datasets, key=slice_z)
    first = ordered[0]
    rows = getattr(first, "Rows", None)
    columns = getattr(first, "Columns", None)
    if rows is None or columns is None:
        raise VolumeBuildError("第一层缺少图像尺寸")
    for ds in ordered:
        if getattr(ds, "Rows", None) != rows or getattr(ds, "Columns", None) != columns:
            raise InconsistentDimensionsError()

    data = np.empty((len(ordered), int(rows), int(columns)), dtype=np.float32)
    for i, ds in enumerate(ordered):
        pixels = _rescaled_pixels(ds)
        if pixels.shape != (rows, columns):
            raise VolumeBuildError(f"第 {i} 层像素形状 {pixels.shape} 与 {(rows, columns)} 不符")
        data[i] = pixels

    first_z = slice_z(first)
    last_z = slice_z(ordered[-1])
    spacing_z = max(abs(last_z - first_z) / (len(ordered) - 1), MIN_SLICE_SPACING)
    row_spacing, col_spacing = _pixel_spacing(first)

    try:
        volume = Volume.from_array(
            data,
            spacing=(col_spacing, row_spacing, spacing_z),
            origin=(_position(first, 0) or 0.0, _position(first, 1) or 0.0, first_z),
            rescale_slope=_first_float(getattr(first, "RescaleSlope", None), 1.0),
            rescale_intercept=_first_float(getattr(first, "RescaleIntercept", None), 0.0),
            window_center=_first_float(getattr(first, "WindowCenter", None), DEFAULT_WINDOW_CENTER),
            window_width=_first_float(getattr(first, "WindowWidth", None), DEFAULT_WINDOW_WIDTH),
        )
    except ValueError as e:
        # 如 PixelSpacing 为 0 或负数
        raise VolumeBuildError(str(e)) from e
    logger.info(
        "已构建体数据：%dx%dx%d，间距 (%.3f, %.3f, %.3f)",
        volume.width, volume.height, volume.depth,
        volume.spacing_x, volume.spacing_y, volume.spacing_z,
    )
    return volume


def read_series(directory: Path) -> List[Dataset]:
    """用 SimpleITK (GDCM) 查找目录下的 DICOM 序列文件，并用 pydicom 逐个读取。"""
    reader = sitk.ImageSeriesReader()
    file_names = reader.GetGDCMSeriesFileNames(str(directory))
    if not file_names:
        raise VolumeBuildError(f"{directory} 下未找到 DICOM 序列")
    logger.info("在 %s 找到 %d 个 DICOM 文件", directory, len(file_names))
    return [pydicom.dcmread(name) for name in file_names]


def load_volume(directory: Path) -> Volume:
    """读取目录下的 DICOM 序列并构建 Volume。"""
    return build_volume(read_series(directory))
