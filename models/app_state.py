# -*- coding: utf-8 -*-
"""
全局应用状态（Model）。
供 ViewModel 读写，View 通过 ViewModel 间接访问。
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from config import DEFAULT_WINDOW_CENTER, DEFAULT_WINDOW_WIDTH
from models.mpr_slice import MPRPlane
from models.rendering import RenderingMode
from models.volume import Volume


@dataclass
class AppState:
    """
    全局应用状态。
    - volume：当前体数据，只读，由 ViewModel 整体替换
    - current_cursor：三视图联动的十字光标体素坐标 (z, y, x)
    - window_center / window_width：窗位窗宽，控制灰度显示
    - rendering_mode / projection_plane / slab_thickness：投影视图参数
    """

    volume: Optional[Volume] = None
    current_cursor: Tuple[int, int, int] = (0, 0, 0)
    window_center: float = DEFAULT_WINDOW_CENTER
    window_width: float = DEFAULT_WINDOW_WIDTH
    rendering_mode: RenderingMode = RenderingMode.MIP
    projection_plane: MPRPlane = MPRPlane.AXIAL
    # 0 = 整个轴向范围
    slab_thickness: int = 0
    transfer_function: str = "Bone"
