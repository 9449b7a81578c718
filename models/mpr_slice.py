# -*- coding: utf-8 -*-
"""
MPR 切片（Model）。
从体数据沿正交平面提取的二维结果，投影结果同样使用此类型（index 固定为 0）。
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np


class MPRPlane(str, Enum):
    """三个正交解剖平面。"""

    AXIAL = "axial"
    SAGITTAL = "sagittal"
    CORONAL = "coronal"

    @property
    def display_name(self) -> str:
        return {
            MPRPlane.AXIAL: "Axial",
            MPRPlane.SAGITTAL: "Sagittal",
            MPRPlane.CORONAL: "Coronal",
        }[self]


@dataclass(frozen=True, eq=False)
class MPRSlice:
    """
    二维切片。
    - pixel_data：一维 float32 缓冲（行主序），构造时复制，不与 Volume 共享存储
    - width / height：输出尺寸，随平面不同而不同
    - pixel_spacing_x / pixel_spacing_y：输出两个方向的物理间距
    """

    plane: MPRPlane
    index: int
    width: int
    height: int
    pixel_data: np.ndarray
    pixel_spacing_x: float
    pixel_spacing_y: float
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self):
        pixel_data = np.array(self.pixel_data, dtype=np.float32).ravel()
        pixel_data.flags.writeable = False
        object.__setattr__(self, "pixel_data", pixel_data)
        object.__setattr__(self, "plane", MPRPlane(self.plane))

    @property
    def image(self) -> Optional[np.ndarray]:
        """(height, width) 视图；缓冲长度与尺寸不符时返回 None。"""
        if self.pixel_data.size != self.width * self.height:
            return None
        return self.pixel_data.reshape(self.height, self.width)
