# -*- coding: utf-8 -*-
"""
三维体数据（Model）。
由多层 DICOM 切片拼装而成的只读体素缓冲，附带间距、原点、Rescale 与默认窗宽窗位。
体素按行主序平铺存放：index = z * (width * height) + y * width + x。
"""

import uuid
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

import numpy as np


def voxel_index(x: int, y: int, z: int, width: int, height: int) -> int:
    """平铺缓冲中 (x, y, z) 的下标，切片与投影共用这一寻址规则。"""
    return z * width * height + y * width + x


@dataclass(frozen=True, eq=False)
class Volume:
    """
    三维体数据。
    - voxels：一维 float32 缓冲，构造时复制并设为只读，长度 = width * height * depth
    - spacing_*：各轴物理间距 (mm)，必须 > 0
    - 体素值已在上游完成 slope/intercept 变换，引擎不会再次应用
    - 两个内容相同的 Volume 仍是不同实体（按 id 区分）
    """

    voxels: np.ndarray
    width: int
    height: int
    depth: int
    spacing_x: float
    spacing_y: float
    spacing_z: float
    origin: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    rescale_slope: float = 1.0
    rescale_intercept: float = 0.0
    window_center: float = 40.0
    window_width: float = 400.0
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self):
        if min(self.width, self.height, self.depth) < 0:
            raise ValueError(
                f"体数据维度不能为负：{(self.width, self.height, self.depth)}"
            )
        if min(self.spacing_x, self.spacing_y, self.spacing_z) <= 0:
            raise ValueError(
                f"体素间距必须为正：{(self.spacing_x, self.spacing_y, self.spacing_z)}"
            )
        voxels = np.array(self.voxels, dtype=np.float32).ravel()
        expected = self.width * self.height * self.depth
        if voxels.size != expected:
            raise ValueError(f"体素数量 {voxels.size} 与维度乘积 {expected} 不一致")
        voxels.flags.writeable = False
        object.__setattr__(self, "voxels", voxels)
        object.__setattr__(self, "origin", tuple(float(v) for v in self.origin))

    @classmethod
    def from_array(
        cls,
        array: np.ndarray,
        spacing: Sequence[float] = (1.0, 1.0, 1.0),
        **kwargs,
    ) -> "Volume":
        """由 (Z, Y, X) 数组构造，spacing 为 (x, y, z) 顺序（与 SimpleITK 一致）。"""
        array = np.asarray(array)
        if array.ndim != 3:
            raise ValueError(f"需要三维数组，实际维度 {array.ndim}")
        depth, height, width = array.shape
        return cls(
            voxels=array.ravel(),
            width=width,
            height=height,
            depth=depth,
            spacing_x=float(spacing[0]),
            spacing_y=float(spacing[1]),
            spacing_z=float(spacing[2]),
            **kwargs,
        )

    @property
    def array(self) -> np.ndarray:
        """同一缓冲的 (depth, height, width) 只读视图，与 voxel_index 的行主序一致。"""
        return self.voxels.reshape(self.depth, self.height, self.width)

    @property
    def shape(self) -> Tuple[int, int, int]:
        """体数据形状 (Z, Y, X)。"""
        return self.depth, self.height, self.width

    @property
    def voxel_count(self) -> int:
        return self.width * self.height * self.depth

    @property
    def physical_size(self) -> Tuple[float, float, float]:
        """物理尺寸 (mm)，(x, y, z) 顺序。"""
        return (
            self.width * self.spacing_x,
            self.height * self.spacing_y,
            self.depth * self.spacing_z,
        )

    def voxel_value(self, x: int, y: int, z: int) -> Optional[float]:
        """取体素值；任一坐标越界时返回 None，不抛异常。"""
        if not (0 <= x < self.width and 0 <= y < self.height and 0 <= z < self.depth):
            return None
        return float(self.voxels[voxel_index(x, y, z, self.width, self.height)])

    def physical_position(self, x: float, y: float, z: float) -> Tuple[float, float, float]:
        """体素坐标 -> 世界坐标 (mm)。"""
        ox, oy, oz = self.origin
        return (
            ox + x * self.spacing_x,
            oy + y * self.spacing_y,
            oz + z * self.spacing_z,
        )
