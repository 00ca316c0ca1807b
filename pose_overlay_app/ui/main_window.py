from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import (
    QFileDialog,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget, QStatusBar, QMessageBox, QMainWindow,
)

from pose_core.types import OverlayFrame
from pose_overlay_app.controller.overlay_controller import AppConfig, OverlayController
from pose_overlay_app.ui.overlay_widget import OverlayWidget


class MainWindow(QMainWindow):
    def __init__(self, config: Optional[AppConfig] = None):
        """初始化主窗口并构造控制器。

        输入: config 为应用配置（模型路径、摄像头编号等）。
        作用: 设置窗口属性，搭建 UI 与事件绑定，再创建控制器。
        """
        super().__init__()
        self.setWindowTitle("实时姿态叠加（Heatmap + PySide6）")
        self.resize(1000, 760)

        self._build_ui()
        self._controller = OverlayController(self, config)
        self._wire_events()

    def _build_ui(self) -> None:
        """构建界面控件与布局。

        输入/输出: 无。
        作用: 初始化按钮、叠加组件、布局与状态栏。
        """
        root = QWidget(self)
        self.setCentralWidget(root)

        self.btn_start = QPushButton("开始摄像头")
        self.btn_stop = QPushButton("停止")
        self.btn_snapshot = QPushButton("保存截图")

        self.lbl_points = QLabel("关键点：--")
        self.lbl_points.setAlignment(Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter)

        grp_controls = QGroupBox("操作")
        controls_layout = QHBoxLayout(grp_controls)
        controls_layout.addWidget(self.btn_start)
        controls_layout.addWidget(self.btn_stop)
        controls_layout.addWidget(self.btn_snapshot)
        controls_layout.addStretch(1)
        controls_layout.addWidget(self.lbl_points)

        self.overlay = OverlayWidget(root)

        layout = QVBoxLayout(root)
        layout.addWidget(grp_controls)
        layout.addWidget(self.overlay, 1)

        self._status = QStatusBar(self)
        self.setStatusBar(self._status)

    def _wire_events(self) -> None:
        """将控件事件连接到控制器。"""
        self.btn_start.clicked.connect(self._controller.start)
        self.btn_stop.clicked.connect(self._on_stop)
        self.btn_snapshot.clicked.connect(self._on_snapshot)
        self._controller.log_message.connect(lambda msg: self.set_status(msg, 3000))

    def _on_stop(self) -> None:
        """停止实时叠加。输入/输出: 无。作用: 委托控制器停止。"""
        self._controller.stop()
        self.set_status("已停止", 2000)

    def _on_snapshot(self) -> None:
        """选择路径并保存当前画面与骨架叠加。"""
        path, _ = QFileDialog.getSaveFileName(
            self,
            "保存截图",
            "pose_overlay.png",
            "Images (*.png *.jpg);;All Files (*)",
        )
        if not path:
            return
        if self._controller.save_snapshot(path):
            self.set_status(f"截图已保存：{path}", 5000)
        else:
            self.show_error("保存失败", "还没有可保存的画面")

    # ====== 供控制器调用（视图接口） ======

    def set_camera_pixmap(self, pixmap: QPixmap) -> None:
        """更新摄像头预览图片。输入: QPixmap。输出: 无。"""
        self.overlay.set_pixmap(pixmap)

    def set_overlay(self, frame: OverlayFrame) -> None:
        """更新骨架叠加层，并显示关键点数。"""
        self.overlay.set_overlay(frame)
        self.lbl_points.setText(f"关键点：{len(frame.keypoints)}")

    def clear_overlay(self) -> None:
        self.overlay.clear()
        self.lbl_points.setText("关键点：--")

    def overlay_size(self) -> tuple[int, int]:
        return self.overlay.surface_size()

    def show_error(self, title: str, message: str) -> None:
        """弹出错误消息框。输入: 标题与内容。输出: 无。"""
        QMessageBox.critical(self, title, message)

    def set_status(self, message: str, timeout_ms: int = 3000) -> None:
        """更新状态栏消息。输入: 文本与超时毫秒。输出: 无。"""
        self.statusBar().showMessage(message, timeout_ms)

    def closeEvent(self, event) -> None:
        """窗口关闭钩子：释放控制器资源后再关闭。

        输入: event。
        输出: 无。
        作用: 确保后台线程与设备释放。
        """
        try:
            self._controller.close()
        finally:
            super().closeEvent(event)
