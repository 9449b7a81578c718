# -*- coding: utf-8 -*-
"""
主窗口（View）。
仅负责布局、菜单、右侧面板、投影/3D 窗口与 ViewModel 的绑定；
业务逻辑与数据均由 ViewModel 提供。
"""

from pathlib import Path
from typing import TYPE_CHECKING

import pyvista as pv
from pyvistaqt import QtInteractor
from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QPixmap
from PySide6.QtWidgets import (
    QComboBox,
    QFileDialog,
    QFormLayout,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QSizePolicy,
    QSlider,
    QSpinBox,
    QStatusBar,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from models import MPRPlane, RenderingMode, TRANSFER_FUNCTION_PRESETS
from views.slice_view import SliceView

if TYPE_CHECKING:
    from viewmodels.main_view_model import MainViewModel


# 深色医疗主题 QSS
STYLESHEET = """
QMainWindow { background-color: #1E1E2E; color: #E0E0E0; }
QLabel { color: #E0E0E0; }
QFrame { background-color: #252535; border: 1px solid #303040; }
QTabWidget::pane { border: 1px solid #303040; }
QTabBar::tab { background: #252535; color: #A0A0B0; padding: 4px 10px; }
QTabBar::tab:selected { background: #3A86FF; color: #FFFFFF; }
QSlider::groove:horizontal { background: #303040; height: 6px; }
QSlider::handle:horizontal { background: #3A86FF; width: 12px; border-radius: 6px; }
QComboBox, QSpinBox { background-color: #303040; color: #E0E0E0; padding: 2px 6px; }
"""


class MainWindow(QMainWindow):
    """
    主窗口 View。
    - 中间 2x2：轴状位、冠状位、矢状位三视图 + 投影/3D 标签页
    - 右侧：患者信息、窗宽窗位、投影参数、传递函数
    """

    def __init__(self, view_model: "MainViewModel", parent=None):
        super().__init__(parent)
        self._view_model = view_model
        self.setWindowTitle("MPR 浏览器")
        self.resize(1400, 860)
        self.setStyleSheet(STYLESHEET)

        self._create_menu()
        central = QWidget(self)
        self.setCentralWidget(central)
        main_layout = QHBoxLayout(central)
        main_layout.setContentsMargins(0, 0, 0, 0)

        main_layout.addWidget(self._create_center_views(), 1)
        right_panel = self._create_right_panel()
        right_panel.setFixedWidth(280)
        main_layout.addWidget(right_panel)

        status = QStatusBar()
        status.setStyleSheet("color: #E0E0E0; background-color: #151521;")
        self.setStatusBar(status)
        self.statusBar().showMessage("就绪")

        self._view_model.volume_loaded.connect(self._on_volume_loaded)
        self._view_model.cursor_changed.connect(self._on_cursor_changed)
        self._view_model.window_changed.connect(self._on_window_changed)
        self._view_model.projection_changed.connect(self._on_projection_changed)
        self._view_model.patient_info_changed.connect(self._on_patient_info_changed)
        self._view_model.status_message.connect(self.statusBar().showMessage)

    def _create_menu(self) -> None:
        menu_bar = self.menuBar()
        file_menu = menu_bar.addMenu("文件")
        open_action = QAction("打开 DICOM 目录", self)
        open_action.triggered.connect(self._on_open_dicom)
        file_menu.addAction(open_action)
        exit_action = QAction("退出", self)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        view_menu = menu_bar.addMenu("视图")
        center_action = QAction("回到中心层", self)
        center_action.triggered.connect(self._view_model.reset_to_center)
        view_menu.addAction(center_action)

    def _create_center_views(self) -> QWidget:
        """中间 2x2 网格：轴状位、冠状位、矢状位、投影/3D 标签页。"""
        center_widget = QWidget()
        grid = QGridLayout(center_widget)
        grid.setContentsMargins(2, 2, 2, 2)
        grid.setSpacing(2)
        for i in range(2):
            grid.setRowStretch(i, 1)
            grid.setColumnStretch(i, 1)

        self._slice_views = [
            SliceView("轴状位", MPRPlane.AXIAL, self._view_model),
            SliceView("冠状位", MPRPlane.CORONAL, self._view_model),
            SliceView("矢状位", MPRPlane.SAGITTAL, self._view_model),
        ]

        self._tabs = QTabWidget()
        self._projection_label = QLabel("未加载数据")
        self._projection_label.setAlignment(Qt.AlignCenter)
        self._projection_label.setScaledContents(True)
        self._projection_label.setSizePolicy(QSizePolicy.Ignored, QSizePolicy.Ignored)
        self._tabs.addTab(self._projection_label, "投影")

        view_3d = QFrame()
        view_3d_layout = QVBoxLayout(view_3d)
        view_3d_layout.setContentsMargins(0, 0, 0, 0)
        self._pv_interactor = QtInteractor(view_3d)
        view_3d_layout.addWidget(self._pv_interactor, 1)
        self._tabs.addTab(view_3d, "3D")
        pv.global_theme.background = "black"
        self._pv_interactor.set_background("black")

        grid.addWidget(self._slice_views[0], 0, 0)
        grid.addWidget(self._slice_views[1], 0, 1)
        grid.addWidget(self._slice_views[2], 1, 0)
        grid.addWidget(self._tabs, 1, 1)
        return center_widget

    def _create_right_panel(self) -> QWidget:
        panel = QFrame()
        panel.setFrameShape(QFrame.StyledPanel)
        layout = QVBoxLayout(panel)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(10)

        title = QLabel("患者信息")
        title.setStyleSheet("color: #ffffff; font-size: 14px; font-weight: bold;")
        layout.addWidget(title)
        form = QFormLayout()
        form.setLabelAlignment(Qt.AlignLeft)
        self._label_patient_name = QLabel("-")
        self._label_patient_id = QLabel("-")
        self._label_study_date = QLabel("-")
        self._label_modality = QLabel("-")
        form.addRow("姓名:", self._label_patient_name)
        form.addRow("编号:", self._label_patient_id)
        form.addRow("检查日期:", self._label_study_date)
        form.addRow("检查类型:", self._label_modality)
        layout.addLayout(form)

        wl_title = QLabel("窗宽窗位")
        wl_title.setStyleSheet("color: #ffffff; font-size: 13px; font-weight: bold;")
        layout.addWidget(wl_title)
        self._combo_preset = QComboBox()
        self._combo_preset.addItem("自定义")
        self._combo_preset.addItems(list(self._view_model.config.window_presets))
        self._combo_preset.currentTextChanged.connect(self._view_model.apply_window_preset)
        layout.addWidget(self._combo_preset)
        center, width = self._view_model.get_window()
        self._slider_ww = QSlider(Qt.Horizontal)
        self._slider_ww.setRange(1, 4000)
        self._slider_ww.setValue(int(width))
        self._slider_ww.valueChanged.connect(self._on_slider_window_changed)
        self._slider_wl = QSlider(Qt.Horizontal)
        self._slider_wl.setRange(-1200, 3000)
        self._slider_wl.setValue(int(center))
        self._slider_wl.valueChanged.connect(self._on_slider_window_changed)
        layout.addWidget(QLabel("窗宽 (W)"))
        layout.addWidget(self._slider_ww)
        layout.addWidget(QLabel("窗位 (L)"))
        layout.addWidget(self._slider_wl)

        proj_title = QLabel("投影")
        proj_title.setStyleSheet("color: #ffffff; font-size: 13px; font-weight: bold;")
        layout.addWidget(proj_title)
        proj_form = QFormLayout()
        self._combo_mode = QComboBox()
        for mode in RenderingMode:
            self._combo_mode.addItem(mode.display_name, mode)
        self._combo_mode.currentIndexChanged.connect(
            lambda i: self._view_model.set_rendering_mode(self._combo_mode.itemData(i))
        )
        self._combo_plane = QComboBox()
        for plane in MPRPlane:
            self._combo_plane.addItem(plane.display_name, plane)
        self._combo_plane.currentIndexChanged.connect(
            lambda i: self._view_model.set_projection_plane(self._combo_plane.itemData(i))
        )
        self._spin_slab = QSpinBox()
        self._spin_slab.setRange(0, 2048)
        self._spin_slab.setSpecialValueText("全部")
        self._spin_slab.setValue(self._view_model.app_state.slab_thickness)
        self._spin_slab.valueChanged.connect(self._view_model.set_slab_thickness)
        self._combo_tf = QComboBox()
        self._combo_tf.addItems(list(TRANSFER_FUNCTION_PRESETS))
        self._combo_tf.currentTextChanged.connect(self._view_model.set_transfer_function)
        proj_form.addRow("模式:", self._combo_mode)
        proj_form.addRow("方向:", self._combo_plane)
        proj_form.addRow("层块厚度:", self._spin_slab)
        proj_form.addRow("传递函数:", self._combo_tf)
        layout.addLayout(proj_form)
        layout.addStretch(1)
        return panel

    # ---------- 菜单与控件槽 ----------

    def _on_open_dicom(self) -> None:
        dir_path = QFileDialog.getExistingDirectory(self, "选择 DICOM 目录")
        if not dir_path:
            return
        ok = self._view_model.load_dicom_directory(Path(dir_path))
        if not ok:
            QMessageBox.critical(self, "错误", "加载 DICOM 失败，请查看状态栏或日志。")

    def _on_slider_window_changed(self) -> None:
        self._view_model.set_window(self._slider_wl.value(), self._slider_ww.value())

    # ---------- ViewModel 信号槽 ----------

    def _on_volume_loaded(self) -> None:
        for view in self._slice_views:
            view.set_volume_loaded()
        self._on_window_changed()
        self._update_3d_view()

    def _on_cursor_changed(self) -> None:
        for view in self._slice_views:
            view.refresh_from_cursor()

    def _on_window_changed(self) -> None:
        """窗宽窗位变化：刷新三视图与投影，右侧滑条同步（避免循环）。"""
        center, width = self._view_model.get_window()
        for slider, value in ((self._slider_ww, width), (self._slider_wl, center)):
            slider.blockSignals(True)
            slider.setValue(int(round(value)))
            slider.blockSignals(False)
        for view in self._slice_views:
            view.refresh_display()
        self._update_projection_view()

    def _on_projection_changed(self) -> None:
        self._update_projection_view()
        if self._view_model.app_state.rendering_mode == RenderingMode.VOLUME_RENDERING:
            self._update_3d_view()
            self._tabs.setCurrentIndex(1)
        else:
            self._tabs.setCurrentIndex(0)

    def _on_patient_info_changed(self) -> None:
        info = self._view_model.get_patient_info()
        self._label_patient_name.setText(info.get("name", "-"))
        self._label_patient_id.setText(info.get("patient_id", "-"))
        self._label_study_date.setText(info.get("study_date", "-"))
        self._label_modality.setText(info.get("modality", "CT"))

    def _update_projection_view(self) -> None:
        qimg = self._view_model.get_projection_display_image()
        if qimg is None:
            self._projection_label.clear()
            self._projection_label.setText("体渲染见 3D 标签页" if self._view_model.volume else "未加载数据")
            return
        self._projection_label.setPixmap(QPixmap.fromImage(qimg))

    def _update_3d_view(self) -> None:
        """用当前体数据与传递函数更新 3D 窗口（体渲染由 VTK 完成）。"""
        result = self._view_model.build_3d_volume_actor()
        self._pv_interactor.clear()
        self._pv_interactor.set_background("black")
        if result is None:
            self._pv_interactor.add_text("未加载数据", color="white", font_size=10)
        else:
            grid, opacity, cmap, clim = result
            self._pv_interactor.add_volume(
                grid, scalars="values", cmap=cmap, opacity=opacity, clim=clim
            )
        self._pv_interactor.reset_camera()
