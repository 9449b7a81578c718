# -*- coding: utf-8 -*-
"""
MPR 切片视图（View）。
仅负责展示与交互：滚轮切层、左键设十字光标、右键拖拽调窗宽窗位；
切片图像与坐标换算均由 ViewModel 提供。
"""

from typing import TYPE_CHECKING, Tuple

from PySide6.QtCore import Qt, QPoint, QPointF
from PySide6.QtGui import QMouseEvent, QWheelEvent, QPixmap
from PySide6.QtWidgets import QFrame, QLabel, QVBoxLayout, QSizePolicy

from models import MPRPlane

if TYPE_CHECKING:
    from viewmodels.main_view_model import MainViewModel

# 右键拖拽每像素对应的 HU 变化量
_WINDOW_DRAG_GAIN = 4.0


class SliceView(QFrame):
    """
    单个 2D 切片视图（轴状位/冠状位/矢状位）。
    - 滚轮：在 ViewModel 给出的层号范围内切层并刷新
    - 左键点击：将屏幕坐标交给 ViewModel 反算体素并设置光标，触发三视图联动
    - 右键拖拽：横向调窗宽、纵向调窗位
    """

    def __init__(
        self,
        title: str,
        orientation: MPRPlane,
        view_model: "MainViewModel",
        parent=None,
    ):
        super().__init__(parent)
        self.setFrameShape(QFrame.StyledPanel)
        self._orientation = MPRPlane(orientation)
        self.setObjectName(f"SliceView-{self._orientation.value}")

        self._view_model = view_model
        self._current_index: int = 0
        self._img_shape_hw: Tuple[int, int] = (0, 0)
        self._last_right_pos = None

        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        layout.setSpacing(2)

        self._title = title
        self._title_label = QLabel(title)
        self._title_label.setStyleSheet("color: #ffffff; font-weight: bold;")
        layout.addWidget(self._title_label)

        self._image_label = QLabel()
        self._image_label.setAlignment(Qt.AlignCenter)
        self._image_label.setScaledContents(True)
        self._image_label.setSizePolicy(QSizePolicy.Ignored, QSizePolicy.Ignored)
        layout.addWidget(self._image_label, 1)

    @property
    def orientation(self) -> MPRPlane:
        return self._orientation

    @property
    def current_index(self) -> int:
        return self._current_index

    def set_volume_loaded(self) -> None:
        """体数据加载后由 MainWindow 调用：用当前光标初始化层号并刷新显示。"""
        self.refresh_from_cursor()

    def refresh_from_cursor(self) -> None:
        """光标变化时由 MainWindow 调用：用光标同步本视图层号并刷新。"""
        self._current_index = self._view_model.get_cursor_slice_index(self._orientation)
        self.refresh_display()

    def refresh_display(self) -> None:
        """从 ViewModel 获取当前层的展示图并更新 Label。"""
        if self._view_model.volume is None:
            self._image_label.clear()
            self._image_label.setText("未加载数据")
            return

        qimg = self._view_model.get_slice_display_image(self._orientation, self._current_index)
        if qimg is None:
            return
        self._img_shape_hw = (qimg.height(), qimg.width())
        self._image_label.setPixmap(QPixmap.fromImage(qimg))
        _, hi = self._view_model.get_slice_index_range(self._orientation)
        self._title_label.setText(f"{self._title}  {self._current_index + 1}/{hi + 1}")

    def wheelEvent(self, event: QWheelEvent) -> None:
        if self._view_model.volume is None:
            return
        step = 1 if event.angleDelta().y() > 0 else -1
        lo, hi = self._view_model.get_slice_index_range(self._orientation)
        self._current_index = max(lo, min(hi, self._current_index + step))
        self.refresh_display()

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.LeftButton and self._view_model.volume is not None:
            self._on_left_click(event.position())
            return
        if event.button() == Qt.RightButton:
            self._last_right_pos = event.position()
            event.accept()
            return
        super().mousePressEvent(event)

    def _on_left_click(self, pos: QPointF) -> None:
        """坐标换算到图像 Label 内再反算体素，避免标题栏导致偏移。"""
        p = self._image_label.mapFrom(self, QPoint(int(pos.x()), int(pos.y())))
        label_w = max(self._image_label.width(), 1)
        label_h = max(self._image_label.height(), 1)
        if p.x() < 0 or p.y() < 0 or p.x() >= label_w or p.y() >= label_h:
            return
        vox = self._view_model.screen_to_voxel(
            self._orientation,
            self._current_index,
            p.x(),
            p.y(),
            label_w,
            label_h,
            self._img_shape_hw,
        )
        if vox is not None:
            self._view_model.set_cursor(*vox)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if event.buttons() & Qt.RightButton:
            if self._last_right_pos is None:
                self._last_right_pos = event.position()
            delta = event.position() - self._last_right_pos
            self._last_right_pos = event.position()
            center, width = self._view_model.get_window()
            self._view_model.set_window(
                center - delta.y() * _WINDOW_DRAG_GAIN,
                width + delta.x() * _WINDOW_DRAG_GAIN,
            )
            event.accept()
            return
        super().mouseMoveEvent(event)
