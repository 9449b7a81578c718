# -*- coding: utf-8 -*-
"""
MPR 浏览器配置。
默认窗宽窗位、窗位预设、层块厚度与日志级别，供 ViewModel 与入口读取。
"""

import os
from dataclasses import dataclass, field
from typing import Dict

# 未指定时的默认 VOI 参数（软组织窗）
DEFAULT_WINDOW_CENTER = 40.0
DEFAULT_WINDOW_WIDTH = 400.0

# 常用 CT 窗位预设，单位 HU
WINDOW_PRESETS: Dict[str, Dict[str, float]] = {
    "Bone": {"center": 500.0, "width": 2000.0},
    "Soft Tissue": {"center": 40.0, "width": 400.0},
    "Lung": {"center": -600.0, "width": 1500.0},
    "Brain": {"center": 40.0, "width": 80.0},
    "Liver": {"center": 60.0, "width": 160.0},
    "Abdomen": {"center": 60.0, "width": 400.0},
}


@dataclass
class ViewerConfig:
    """浏览器运行配置。"""

    window_center: float = DEFAULT_WINDOW_CENTER
    window_width: float = DEFAULT_WINDOW_WIDTH
    # 用户拖拽调窗时窗宽的下限，防止除零
    min_window_width: float = 1.0
    # 0 表示投影覆盖整个轴向范围
    slab_thickness: int = 0
    log_level: str = field(default_factory=lambda: os.environ.get("MPR_LOG_LEVEL", "INFO"))
    window_presets: Dict[str, Dict[str, float]] = field(
        default_factory=lambda: dict(WINDOW_PRESETS)
    )
