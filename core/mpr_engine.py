# -*- coding: utf-8 -*-
"""
MPR 重建引擎：正交平面切片提取与强度投影（MIP / MinIP / AIP）。
所有函数均为无状态纯函数：不修改输入 Volume，每次返回新分配的 MPRSlice；
越界层号、空体数据等不可计算的情况返回 None，不抛异常。

平面与输出的对应关系（输出行、列 <- 体素）：
- axial：   行 y、列 x <- voxel(x, y, index)，尺寸 width x height，间距 (sx, sy)
- sagittal：行 y、列 z <- voxel(index, y, z)，尺寸 depth x height，间距 (sz, sy)
- coronal： 行 z、列 x <- voxel(x, index, z)，尺寸 width x depth，间距 (sx, sz)
"""

import logging
from enum import Enum
from typing import Optional

import numpy as np

from core.windowing import render_slice
from models.mpr_slice import MPRPlane, MPRSlice
from models.rendering import RenderingMode
from models.volume import Volume

logger = logging.getLogger(__name__)

__all__ = [
    "ProjectionMode",
    "extract_axial_slice",
    "extract_sagittal_slice",
    "extract_coronal_slice",
    "extract_slice",
    "max_slice_index",
    "generate_projection",
    "generate_mip",
    "generate_min_ip",
    "generate_average_ip",
    "generate_rendering",
    "render_slice",
]


class ProjectionMode(str, Enum):
    MAX = "max"
    MIN = "min"
    AVERAGE = "average"


# 投影/切片所沿的数组轴：Volume.array 为 (Z, Y, X)
_PLANE_AXIS = {
    MPRPlane.AXIAL: 0,
    MPRPlane.CORONAL: 1,
    MPRPlane.SAGITTAL: 2,
}


def _is_degenerate(volume: Volume) -> bool:
    return volume.voxel_count == 0


def _extent(volume: Volume, plane: MPRPlane) -> int:
    return volume.shape[_PLANE_AXIS[MPRPlane(plane)]]


def _make_slice(volume: Volume, plane: MPRPlane, index: int, image: np.ndarray) -> MPRSlice:
    """image 为输出平面上的 (行, 列) 数组；尺寸与间距按平面取自 volume。"""
    height, width = image.shape
    if plane == MPRPlane.AXIAL:
        spacing = (volume.spacing_x, volume.spacing_y)
    elif plane == MPRPlane.SAGITTAL:
        spacing = (volume.spacing_z, volume.spacing_y)
    else:
        spacing = (volume.spacing_x, volume.spacing_z)
    return MPRSlice(
        plane=plane,
        index=index,
        width=width,
        height=height,
        pixel_data=np.ascontiguousarray(image, dtype=np.float32).ravel(),
        pixel_spacing_x=spacing[0],
        pixel_spacing_y=spacing[1],
    )


def max_slice_index(plane: MPRPlane, volume: Volume) -> int:
    """某平面的最大有效层号（含），axial=depth-1，sagittal=width-1，coronal=height-1。"""
    return _extent(volume, plane) - 1


def _index_valid(volume: Volume, plane: MPRPlane, index: int) -> bool:
    if _is_degenerate(volume) or not 0 <= index <= max_slice_index(plane, volume):
        logger.debug("%s 层号 %s 超出范围 [0, %d]", plane.value, index, max_slice_index(plane, volume))
        return False
    return True


def extract_axial_slice(volume: Volume, index: int) -> Optional[MPRSlice]:
    """轴状位：固定 z，输出 width x height。"""
    if not _index_valid(volume, MPRPlane.AXIAL, index):
        return None
    return _make_slice(volume, MPRPlane.AXIAL, index, volume.array[index, :, :])


def extract_sagittal_slice(volume: Volume, index: int) -> Optional[MPRSlice]:
    """矢状位：固定 x，输出 depth x height（行 y，列 z）。"""
    if not _index_valid(volume, MPRPlane.SAGITTAL, index):
        return None
    # array[:, :, x] 为 (z, y)，转置为 (y, z)
    return _make_slice(volume, MPRPlane.SAGITTAL, index, volume.array[:, :, index].T)


def extract_coronal_slice(volume: Volume, index: int) -> Optional[MPRSlice]:
    """冠状位：固定 y，输出 width x depth（行 z，列 x）。"""
    if not _index_valid(volume, MPRPlane.CORONAL, index):
        return None
    return _make_slice(volume, MPRPlane.CORONAL, index, volume.array[:, index, :])


_EXTRACTORS = {
    MPRPlane.AXIAL: extract_axial_slice,
    MPRPlane.SAGITTAL: extract_sagittal_slice,
    MPRPlane.CORONAL: extract_coronal_slice,
}


def extract_slice(volume: Volume, plane: MPRPlane, index: int) -> Optional[MPRSlice]:
    """按平面分派到对应的提取函数。"""
    return _EXTRACTORS[MPRPlane(plane)](volume, index)


def generate_projection(
    volume: Volume,
    plane: MPRPlane,
    mode: ProjectionMode,
    slab_thickness: Optional[int] = 0,
) -> Optional[MPRSlice]:
    """
    沿平面对应的轴做强度投影（axial 沿 Z，sagittal 沿 X，coronal 沿 Y）。
    层块总是从该轴的 0 号层开始，长度为 slab_thickness 与轴长的较小者；
    slab_thickness 为 None 或 0 时覆盖整个轴，非整数向下取整。输出尺寸与间距同该平面的切片。
    """
    plane = MPRPlane(plane)
    mode = ProjectionMode(mode)
    extent = _extent(volume, plane)
    if _is_degenerate(volume) or extent == 0:
        return None
    if slab_thickness is not None and slab_thickness < 0:
        logger.debug("层块厚度 %s 无效", slab_thickness)
        return None
    thickness = int(slab_thickness) if slab_thickness is not None else 0
    length = extent if thickness == 0 else min(thickness, extent)

    axis = _PLANE_AXIS[plane]
    slab = np.take(volume.array, np.arange(length), axis=axis)
    if mode == ProjectionMode.MAX:
        projected = slab.max(axis=axis)
    elif mode == ProjectionMode.MIN:
        projected = slab.min(axis=axis)
    else:
        projected = slab.mean(axis=axis, dtype=np.float64)

    if plane == MPRPlane.SAGITTAL:
        # 沿 X 归约后为 (z, y)，转置为 (y, z)
        projected = projected.T
    return _make_slice(volume, plane, 0, projected)


def generate_mip(volume: Volume, plane: MPRPlane, slab_thickness: Optional[int] = 0) -> Optional[MPRSlice]:
    """最大强度投影。"""
    return generate_projection(volume, plane, ProjectionMode.MAX, slab_thickness)


def generate_min_ip(volume: Volume, plane: MPRPlane, slab_thickness: Optional[int] = 0) -> Optional[MPRSlice]:
    """最小强度投影。"""
    return generate_projection(volume, plane, ProjectionMode.MIN, slab_thickness)


def generate_average_ip(volume: Volume, plane: MPRPlane, slab_thickness: Optional[int] = 0) -> Optional[MPRSlice]:
    """平均强度投影，未加权算术平均，不做取整。"""
    return generate_projection(volume, plane, ProjectionMode.AVERAGE, slab_thickness)


_RENDERING_PROJECTIONS = {
    RenderingMode.MIP: ProjectionMode.MAX,
    RenderingMode.MIN_IP: ProjectionMode.MIN,
    RenderingMode.AVERAGE_IP: ProjectionMode.AVERAGE,
}


def generate_rendering(
    volume: Volume,
    mode: RenderingMode,
    plane: MPRPlane = MPRPlane.AXIAL,
    slab_thickness: Optional[int] = 0,
) -> Optional[MPRSlice]:
    """按渲染模式生成投影；volume_rendering 不由本引擎计算，返回 None。"""
    projection = _RENDERING_PROJECTIONS.get(RenderingMode(mode))
    if projection is None:
        return None
    return generate_projection(volume, plane, projection, slab_thickness)
