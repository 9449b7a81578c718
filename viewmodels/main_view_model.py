# -*- coding: utf-8 -*-
"""
主界面 ViewModel（MVVM）。
负责：DICOM 序列加载、光标与窗宽窗位状态、三平面切片与投影的显示图像、3D 体渲染数据。
切片与投影计算委托给 core.mpr_engine；View 通过信号接收刷新通知，通过方法获取展示数据与执行命令。
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
import pydicom
import pyvista as pv
from matplotlib.colors import ListedColormap
from pydicom.errors import InvalidDicomError
from PySide6.QtCore import QObject, Signal
from PySide6.QtGui import QImage, QColor, QPen, QPainter

from config import ViewerConfig
from core import mpr_engine
from core.errors import MPREngineError
from core.volume_builder import build_volume, read_series
from core.windowing import render_slice
from models import AppState, MPRPlane, MPRSlice, RenderingMode, TRANSFER_FUNCTION_PRESETS, Volume

logger = logging.getLogger(__name__)

# 各朝向十字线颜色
_CROSSHAIR_COLORS = {
    MPRPlane.AXIAL: QColor(255, 0, 0),
    MPRPlane.CORONAL: QColor(0, 255, 0),
    MPRPlane.SAGITTAL: QColor(0, 160, 255),
}


def to_qimage(display: np.ndarray) -> QImage:
    """uint8 (H, W) 灰度缓冲 -> 独立持有数据的 RGB32 QImage。"""
    display = np.ascontiguousarray(display, dtype=np.uint8)
    h_img, w_img = display.shape
    return QImage(
        display.data,
        w_img,
        h_img,
        w_img,
        QImage.Format_Grayscale8,
    ).convertToFormat(QImage.Format_RGB32)


class MainViewModel(QObject):
    """
    主界面 ViewModel。
    - 持有 AppState（含只读 Volume），提供加载 DICOM、设置光标/窗宽窗位/投影参数等命令
    - 按朝向与层号生成带十字线的切片 QImage，按渲染模式生成投影 QImage
    - 发出信号：volume_loaded, cursor_changed, window_changed, projection_changed,
      patient_info_changed, status_message
    """

    volume_loaded = Signal()
    cursor_changed = Signal()
    window_changed = Signal()
    # 渲染模式 / 投影平面 / 层块厚度 / 传递函数变化
    projection_changed = Signal()
    patient_info_changed = Signal()
    status_message = Signal(str)

    def __init__(self, config: Optional[ViewerConfig] = None, parent=None):
        super().__init__(parent)
        self._config = config or ViewerConfig()
        self._app_state = AppState(
            window_center=self._config.window_center,
            window_width=self._config.window_width,
            slab_thickness=self._config.slab_thickness,
        )
        self._patient_info: dict = {}

    @property
    def app_state(self) -> AppState:
        """全局应用状态，只读供 View 绑定滑条等。"""
        return self._app_state

    @property
    def volume(self) -> Optional[Volume]:
        """当前体数据，未加载时为 None。"""
        return self._app_state.volume

    @property
    def config(self) -> ViewerConfig:
        return self._config

    # ---------- 命令：数据加载 ----------

    def load_dicom_directory(self, directory: Path) -> bool:
        """
        从指定目录加载 DICOM 序列并构建 Volume。
        成功时发出 volume_loaded、patient_info_changed、status_message；失败只发 status_message。
        """
        try:
            datasets = read_series(directory)
            volume = build_volume(datasets)
        except (MPREngineError, InvalidDicomError, OSError, RuntimeError) as e:
            # SimpleITK 找不到序列时抛 RuntimeError
            logger.error("加载 DICOM 失败：%s", e)
            self.status_message.emit(f"加载 DICOM 失败：{e}")
            return False

        self.set_volume(volume)
        self.status_message.emit(f"已加载 DICOM 序列：{directory}，体数据形状 {volume.shape}")
        self._emit_patient_info(datasets[0])
        return True

    def set_volume(self, volume: Volume) -> None:
        """替换当前体数据：窗宽窗位取体数据默认值，光标置于中心。"""
        self._app_state.volume = volume
        self._app_state.window_center = volume.window_center
        self._app_state.window_width = max(volume.window_width, self._config.min_window_width)
        self.reset_to_center()
        self.volume_loaded.emit()

    def _emit_patient_info(self, ds: pydicom.Dataset) -> None:
        """从 pydicom Dataset 解析患者信息并发出 patient_info_changed。"""
        def get_attr(name: str, default: str = "-") -> str:
            value = getattr(ds, name, default)
            return str(value) if value is not None else default

        self._patient_info = {
            "name": get_attr("PatientName"),
            "patient_id": get_attr("PatientID"),
            "study_date": get_attr("StudyDate"),
            "modality": get_attr("Modality", "CT"),
            "series_description": get_attr("SeriesDescription"),
            "slice_thickness": get_attr("SliceThickness", "?"),
        }
        self.patient_info_changed.emit()

    def get_patient_info(self) -> dict:
        return self._patient_info

    # ---------- 命令：光标与窗宽窗位 ----------

    def set_cursor(self, z: int, y: int, x: int) -> None:
        """设置全局十字光标 (z,y,x)，越界坐标夹取到体数据范围内，并发出 cursor_changed。"""
        volume = self.volume
        if volume is None or volume.voxel_count == 0:
            return
        z = int(np.clip(z, 0, volume.depth - 1))
        y = int(np.clip(y, 0, volume.height - 1))
        x = int(np.clip(x, 0, volume.width - 1))
        self._app_state.current_cursor = (z, y, x)
        value = volume.voxel_value(x, y, z)
        px, py, pz = volume.physical_position(x, y, z)
        self.status_message.emit(
            f"体素 ({x}, {y}, {z})  位置 ({px:.1f}, {py:.1f}, {pz:.1f}) mm  值 {value:.1f}"
        )
        self.cursor_changed.emit()

    def reset_to_center(self) -> None:
        """光标回到体数据中心层。"""
        volume = self.volume
        if volume is None:
            return
        self._app_state.current_cursor = (
            max(volume.depth - 1, 0) // 2,
            max(volume.height - 1, 0) // 2,
            max(volume.width - 1, 0) // 2,
        )
        self.cursor_changed.emit()

    def set_window(self, window_center: float, window_width: float) -> None:
        """设置窗位窗宽（窗宽不低于配置下限），并发出 window_changed。"""
        self._app_state.window_center = float(window_center)
        self._app_state.window_width = max(float(window_width), self._config.min_window_width)
        self.window_changed.emit()

    def apply_window_preset(self, name: str) -> bool:
        preset = self._config.window_presets.get(name)
        if preset is None:
            return False
        self.set_window(preset["center"], preset["width"])
        return True

    def get_window(self) -> Tuple[float, float]:
        """返回当前 (窗位, 窗宽)，供 View 同步滑条数值（避免循环触发）。"""
        return self._app_state.window_center, self._app_state.window_width

    # ---------- 命令：投影参数 ----------

    def set_rendering_mode(self, mode: RenderingMode) -> None:
        self._app_state.rendering_mode = RenderingMode(mode)
        self.projection_changed.emit()

    def set_projection_plane(self, plane: MPRPlane) -> None:
        self._app_state.projection_plane = MPRPlane(plane)
        self.projection_changed.emit()

    def set_slab_thickness(self, thickness: int) -> None:
        """层块厚度，0 表示整个轴向范围。"""
        self._app_state.slab_thickness = max(0, int(thickness))
        self.projection_changed.emit()

    def set_transfer_function(self, name: str) -> None:
        if name in TRANSFER_FUNCTION_PRESETS:
            self._app_state.transfer_function = name
            self.projection_changed.emit()

    # ---------- 供 View 获取展示数据 ----------

    def get_slice(self, orientation: MPRPlane, slice_index: int) -> Optional[MPRSlice]:
        if self.volume is None:
            return None
        return mpr_engine.extract_slice(self.volume, MPRPlane(orientation), slice_index)

    def get_slice_display_image(self, orientation: MPRPlane, slice_index: int) -> Optional[QImage]:
        """
        根据朝向与层号生成带窗宽窗位与十字线的切片 QImage。
        层号越界或无数据时返回 None。
        """
        orientation = MPRPlane(orientation)
        mpr_slice = self.get_slice(orientation, slice_index)
        if mpr_slice is None:
            return None
        display = render_slice(mpr_slice, *self.get_window())
        if display is None:
            return None
        qimg = to_qimage(display)

        h_pos, v_pos = self.reference_line_positions(orientation)
        row = int(round(h_pos * (qimg.height() - 1)))
        col = int(round(v_pos * (qimg.width() - 1)))
        painter = QPainter(qimg)
        pen = QPen(_CROSSHAIR_COLORS[orientation])
        pen.setWidth(1)
        painter.setPen(pen)
        painter.drawLine(0, row, qimg.width() - 1, row)
        painter.drawLine(col, 0, col, qimg.height() - 1)
        painter.end()
        return qimg

    def get_projection(self) -> Optional[MPRSlice]:
        """按当前渲染模式、投影平面与层块厚度生成投影；体渲染模式返回 None。"""
        if self.volume is None:
            return None
        state = self._app_state
        return mpr_engine.generate_rendering(
            self.volume, state.rendering_mode, state.projection_plane, state.slab_thickness
        )

    def get_projection_display_image(self) -> Optional[QImage]:
        projection = self.get_projection()
        if projection is None:
            return None
        display = render_slice(projection, *self.get_window())
        return to_qimage(display) if display is not None else None

    def cursor_display_position(self, orientation: MPRPlane) -> Tuple[int, int]:
        """十字光标在该朝向切片图像上的 (row, col)，与引擎输出的行列约定一致。"""
        z, y, x = self._app_state.current_cursor
        orientation = MPRPlane(orientation)
        if orientation == MPRPlane.AXIAL:
            return y, x
        if orientation == MPRPlane.SAGITTAL:
            return y, z
        return z, x

    def get_current_cursor_slice_indices(self) -> Tuple[int, int, int]:
        """返回 (axial_index, coronal_index, sagittal_index) 供 View 同步三视图层号。"""
        if self.volume is None:
            return 0, 0, 0
        return self._app_state.current_cursor

    def get_cursor_slice_index(self, orientation: MPRPlane) -> int:
        z, y, x = self.get_current_cursor_slice_indices()
        return {MPRPlane.AXIAL: z, MPRPlane.CORONAL: y, MPRPlane.SAGITTAL: x}[MPRPlane(orientation)]

    def get_slice_index_range(self, orientation: MPRPlane) -> Tuple[int, int]:
        """返回某朝向的层索引范围 (min_index, max_index)，无数据时 (0, 0)。"""
        if self.volume is None:
            return 0, 0
        return 0, max(mpr_engine.max_slice_index(MPRPlane(orientation), self.volume), 0)

    def reference_line_positions(self, orientation: MPRPlane) -> Tuple[float, float]:
        """
        该朝向视图中两条参考线的归一化位置 (水平线, 竖直线)，0~1。
        即十字光标的 (row, col) 除以切片的 (height-1, width-1)；某方向只有一行/列时取 0.5。
        """
        if self.volume is None:
            return 0.5, 0.5

        def normalized(position: int, size: int) -> float:
            return position / (size - 1) if size > 1 else 0.5

        row, col = self.cursor_display_position(orientation)
        height, width = self.slice_display_shape(orientation)
        return normalized(row, height), normalized(col, width)

    def slice_display_shape(self, orientation: MPRPlane) -> Tuple[int, int]:
        """该朝向切片图像的 (height, width)，无数据时 (0, 0)。"""
        volume = self.volume
        if volume is None:
            return 0, 0
        orientation = MPRPlane(orientation)
        if orientation == MPRPlane.AXIAL:
            return volume.height, volume.width
        if orientation == MPRPlane.SAGITTAL:
            return volume.height, volume.depth
        return volume.depth, volume.width

    def screen_to_voxel(
        self,
        orientation: MPRPlane,
        slice_index: int,
        local_x: float,
        local_y: float,
        display_width: int,
        display_height: int,
        img_shape_hw: Tuple[int, int],
    ) -> Optional[Tuple[int, int, int]]:
        """
        将 View 上鼠标位置 (local_x, local_y) 反算为体素坐标 (z, y, x)。
        display_* 为当前显示区域宽高，img_shape_hw 为该朝向切片的 (height, width)。
        """
        volume = self.volume
        if volume is None:
            return None
        h_img, w_img = img_shape_hw
        if h_img <= 0 or w_img <= 0 or display_width <= 0 or display_height <= 0:
            return None
        col = int(local_x * w_img / display_width)
        row = int(local_y * h_img / display_height)
        z, y, x = self._app_state.current_cursor

        orientation = MPRPlane(orientation)
        if orientation == MPRPlane.AXIAL:
            z, y, x = slice_index, row, col
        elif orientation == MPRPlane.SAGITTAL:
            z, y, x = col, row, slice_index
        else:
            z, y, x = row, slice_index, col

        z = int(np.clip(z, 0, volume.depth - 1))
        y = int(np.clip(y, 0, volume.height - 1))
        x = int(np.clip(x, 0, volume.width - 1))
        return (z, y, x)

    # ---------- 3D 相关（供 View 调用） ----------

    def build_3d_volume_actor(self):
        """
        用当前体数据构建 pyvista ImageData，以及传递函数的不透明度表与颜色映射。
        返回 (grid, opacity, cmap, clim)，无数据时返回 None；体渲染算法本身由 VTK 完成。
        """
        volume = self.volume
        if volume is None or volume.voxel_count == 0:
            return None
        grid = pv.ImageData()
        grid.dimensions = (volume.width, volume.height, volume.depth)
        grid.spacing = (volume.spacing_x, volume.spacing_y, volume.spacing_z)
        grid.origin = volume.origin
        # 平铺缓冲为 x 最快变化，与 VTK 点序一致
        grid.point_data["values"] = np.array(volume.voxels)
        tf = TRANSFER_FUNCTION_PRESETS[self._app_state.transfer_function]
        center, width = self.get_window()
        clim = (center - width / 2.0, center + width / 2.0)
        cmap = ListedColormap(tf.color_table(), name=tf.name)
        return grid, tf.opacity_table(), cmap, clim
