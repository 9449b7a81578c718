# -*- coding: utf-8 -*-
"""
Core 层：与界面无关的 MPR 计算。
- mpr_engine：正交切片提取与 MIP / MinIP / AIP 投影
- windowing：VOI LUT 调窗与 uint8 显示缓冲
- volume_builder：由 DICOM 序列拼装 Volume
"""

from . import mpr_engine
from .errors import (
    MPREngineError,
    InsufficientSlicesError,
    InconsistentDimensionsError,
    MissingPixelDataError,
    VolumeBuildError,
)
from .windowing import VOIFunction, render_slice
from .volume_builder import build_volume, load_volume, read_series

__all__ = [
    "mpr_engine",
    "MPREngineError",
    "InsufficientSlicesError",
    "InconsistentDimensionsError",
    "MissingPixelDataError",
    "VolumeBuildError",
    "VOIFunction",
    "render_slice",
    "build_volume",
    "load_volume",
    "read_series",
]
