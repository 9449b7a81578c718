# -*- coding: utf-8 -*-
"""
Model 层：应用核心数据与领域对象。
- Volume：只读三维体数据（体素缓冲、间距、原点、默认窗宽窗位）
- MPRPlane / MPRSlice：正交平面与二维切片结果
- RenderingMode / TransferFunction：投影模式与 3D 传递函数预设
- AppState：全局应用状态（光标、窗宽窗位、投影参数等）
"""

from .volume import Volume, voxel_index
from .mpr_slice import MPRPlane, MPRSlice
from .rendering import RenderingMode, TransferFunction, TRANSFER_FUNCTION_PRESETS
from .app_state import AppState

__all__ = [
    "Volume",
    "voxel_index",
    "MPRPlane",
    "MPRSlice",
    "RenderingMode",
    "TransferFunction",
    "TRANSFER_FUNCTION_PRESETS",
    "AppState",
]
