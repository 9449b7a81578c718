# -*- coding: utf-8 -*-
"""
ViewModel 层：连接 Model 与 View，暴露状态与命令，驱动 UI 更新。
- MainViewModel：MPR 三视图、投影视图与 3D 视图的状态与命令，通过信号通知 View 刷新。
"""

from .main_view_model import MainViewModel, to_qimage

__all__ = ["MainViewModel", "to_qimage"]
