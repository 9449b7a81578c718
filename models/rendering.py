# -*- coding: utf-8 -*-
"""
渲染模式与传递函数（Model）。
RenderingMode 供投影视图选择 MIP / MinIP / AIP；volume_rendering 交由 3D 视图（pyvista/VTK）处理，
TransferFunction 预设提供给 3D 视图的不透明度与颜色表。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple

import numpy as np


class RenderingMode(str, Enum):
    MIP = "mip"
    MIN_IP = "min_ip"
    AVERAGE_IP = "average_ip"
    VOLUME_RENDERING = "volume_rendering"

    @property
    def display_name(self) -> str:
        return {
            RenderingMode.MIP: "Maximum Intensity (MIP)",
            RenderingMode.MIN_IP: "Minimum Intensity (MinIP)",
            RenderingMode.AVERAGE_IP: "Average Intensity (AIP)",
            RenderingMode.VOLUME_RENDERING: "Volume Rendering",
        }[self]


@dataclass(frozen=True)
class ControlPoint:
    """归一化强度 value (0~1) 处的不透明度与 RGB 颜色。"""

    value: float
    opacity: float
    color: Tuple[float, float, float]


@dataclass(frozen=True)
class TransferFunction:
    name: str
    control_points: Tuple[ControlPoint, ...]

    def opacity_table(self, samples: int = 256) -> np.ndarray:
        """按控制点线性插值得到 samples 个不透明度，供 pyvista add_volume(opacity=...)。"""
        xs = np.linspace(0.0, 1.0, samples)
        values = [p.value for p in self.control_points]
        opacities = [p.opacity for p in self.control_points]
        return np.interp(xs, values, opacities)

    def color_table(self, samples: int = 256) -> np.ndarray:
        """(samples, 3) 的 RGB 表，分量 0~1。"""
        xs = np.linspace(0.0, 1.0, samples)
        values = [p.value for p in self.control_points]
        channels = [
            np.interp(xs, values, [p.color[i] for p in self.control_points])
            for i in range(3)
        ]
        return np.stack(channels, axis=1)


def _tf(name: str, points: List[Tuple[float, float, Tuple[float, float, float]]]) -> TransferFunction:
    return TransferFunction(name, tuple(ControlPoint(v, o, c) for v, o, c in points))


BONE = _tf("Bone", [
    (0.0, 0.0, (0.0, 0.0, 0.0)),
    (0.3, 0.0, (0.0, 0.0, 0.0)),
    (0.5, 0.3, (0.8, 0.7, 0.6)),
    (0.7, 0.7, (1.0, 0.9, 0.8)),
    (1.0, 1.0, (1.0, 1.0, 1.0)),
])

SOFT_TISSUE = _tf("Soft Tissue", [
    (0.0, 0.0, (0.0, 0.0, 0.0)),
    (0.3, 0.0, (0.0, 0.0, 0.0)),
    (0.4, 0.2, (0.8, 0.4, 0.3)),
    (0.5, 0.5, (0.9, 0.6, 0.5)),
    (0.7, 0.3, (1.0, 0.8, 0.7)),
    (1.0, 0.0, (1.0, 1.0, 1.0)),
])

LUNG = _tf("Lung", [
    (0.0, 0.0, (0.0, 0.0, 0.0)),
    (0.15, 0.0, (0.0, 0.0, 0.2)),
    (0.25, 0.3, (0.2, 0.3, 0.6)),
    (0.4, 0.1, (0.5, 0.5, 0.5)),
    (0.7, 0.5, (0.9, 0.8, 0.7)),
    (1.0, 1.0, (1.0, 1.0, 1.0)),
])

ANGIOGRAPHY = _tf("Angiography", [
    (0.0, 0.0, (0.0, 0.0, 0.0)),
    (0.4, 0.0, (0.0, 0.0, 0.0)),
    (0.5, 0.3, (0.8, 0.1, 0.1)),
    (0.65, 0.7, (1.0, 0.3, 0.2)),
    (0.8, 0.9, (1.0, 0.6, 0.4)),
    (1.0, 1.0, (1.0, 0.9, 0.8)),
])

# MIP 传递函数：处处完全不透明
MIP = _tf("MIP", [
    (0.0, 1.0, (0.0, 0.0, 0.0)),
    (0.5, 1.0, (0.5, 0.5, 0.5)),
    (1.0, 1.0, (1.0, 1.0, 1.0)),
])

TRANSFER_FUNCTION_PRESETS: Dict[str, TransferFunction] = {
    tf.name: tf for tf in (BONE, SOFT_TISSUE, LUNG, ANGIOGRAPHY, MIP)
}
