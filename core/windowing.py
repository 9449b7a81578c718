# -*- coding: utf-8 -*-
"""
调窗（VOI LUT）与显示缓冲生成。
按 DICOM PS3.3 C.11.2.1.2 的 VOI 函数把原始浮点强度映射到 [0, 1]，再量化为 uint8 灰度。
"""

import logging
from enum import Enum
from typing import Optional

import numpy as np

from models.mpr_slice import MPRSlice

logger = logging.getLogger(__name__)


class VOIFunction(str, Enum):
    """DICOM VOI LUT Function (0028,1056) 的取值。"""

    LINEAR = "LINEAR"
    LINEAR_EXACT = "LINEAR_EXACT"
    SIGMOID = "SIGMOID"


def apply_linear_exact_voi(values, center: float, width: float) -> np.ndarray:
    """LINEAR_EXACT：(x - c) / w + 0.5，两端截断。"""
    values = np.asarray(values, dtype=np.float64)
    if width <= 0:
        return np.zeros_like(values)
    lower = center - width / 2.0
    upper = center + width / 2.0
    out = np.clip((values - center) / width + 0.5, 0.0, 1.0)
    out = np.where(values <= lower, 0.0, out)
    return np.where(values > upper, 1.0, out)


def apply_linear_voi(values, center: float, width: float) -> np.ndarray:
    """
    LINEAR：x <= c - w/2 -> 0；x > c + w/2 -> 1；其余 ((x - (c - 0.5)) / (w - 1) + 0.5)。
    w <= 1 时标准公式退化，改用 LINEAR_EXACT。
    """
    values = np.asarray(values, dtype=np.float64)
    if width <= 0:
        return np.zeros_like(values)
    if width <= 1:
        return apply_linear_exact_voi(values, center, width)
    lower = center - width / 2.0
    upper = center + width / 2.0
    out = np.clip((values - (center - 0.5)) / (width - 1.0) + 0.5, 0.0, 1.0)
    out = np.where(values <= lower, 0.0, out)
    return np.where(values > upper, 1.0, out)


def apply_sigmoid_voi(values, center: float, width: float) -> np.ndarray:
    """SIGMOID：1 / (1 + exp(-4 (x - c) / w))。"""
    values = np.asarray(values, dtype=np.float64)
    if width <= 0:
        return np.zeros_like(values)
    return 1.0 / (1.0 + np.exp(-4.0 * (values - center) / width))


_VOI_FUNCTIONS = {
    VOIFunction.LINEAR: apply_linear_voi,
    VOIFunction.LINEAR_EXACT: apply_linear_exact_voi,
    VOIFunction.SIGMOID: apply_sigmoid_voi,
}


def apply_voi(values, center: float, width: float, function: VOIFunction = VOIFunction.LINEAR) -> np.ndarray:
    return _VOI_FUNCTIONS[VOIFunction(function)](values, center, width)


def render_slice(
    mpr_slice: MPRSlice,
    window_center: float,
    window_width: float,
    voi_function: VOIFunction = VOIFunction.LINEAR,
) -> Optional[np.ndarray]:
    """
    将切片按窗位窗宽转换为 (height, width) 的 uint8 显示缓冲。
    切片为空或像素数与 width * height 不符时返回 None。
    """
    w, h = mpr_slice.width, mpr_slice.height
    if w <= 0 or h <= 0:
        return None
    if mpr_slice.pixel_data.size != w * h:
        # 上游逻辑错误，记录后返回 None，不中断显示
        logger.warning(
            "切片像素数 %d 与尺寸 %dx%d 不符，跳过渲染",
            mpr_slice.pixel_data.size, w, h,
        )
        return None
    normalized = apply_voi(mpr_slice.pixel_data, window_center, window_width, voi_function)
    display = np.clip(normalized * 255.0, 0, 255).astype(np.uint8)
    return display.reshape(h, w)
