"""
摄像头预览 + 骨架叠加组件
"""
from typing import Optional

from PySide6.QtCore import QPointF, Qt
from PySide6.QtGui import QBrush, QColor, QPainter, QPen, QPixmap
from PySide6.QtWidgets import QSizePolicy, QWidget

from pose_core.types import OverlayFrame


class OverlayWidget(QWidget):
    """预览画面与骨架叠加层共用同一坐标系：控件宽高即叠加层尺寸。"""

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.setMinimumSize(640, 480)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self._pixmap: Optional[QPixmap] = None
        self._overlay: Optional[OverlayFrame] = None

        self._point_pen = QPen(QColor("blue"))
        self._point_brush = QBrush(QColor("blue"))
        self._line_pen = QPen(QColor("green"), 5)
        self._radius = 10.0

    def set_pixmap(self, pixmap: QPixmap) -> None:
        self._pixmap = pixmap
        self.update()

    def set_overlay(self, frame: OverlayFrame) -> None:
        self._overlay = frame
        self.update()

    def clear(self) -> None:
        """清空画面与叠加层"""
        self._pixmap = None
        self._overlay = None
        self.update()

    def surface_size(self) -> tuple[int, int]:
        return self.width(), self.height()

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing)
            if self._pixmap is not None:
                painter.drawPixmap(self.rect(), self._pixmap)
            else:
                painter.fillRect(self.rect(), QColor("#f5f5f5"))
                painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "等待摄像头输入...")

            overlay = self._overlay
            if overlay is None:
                return
            points = [QPointF(x, y) for x, y in overlay.points]

            painter.setPen(self._point_pen)
            painter.setBrush(self._point_brush)
            for p in points:
                painter.drawEllipse(p, self._radius, self._radius)

            painter.setPen(self._line_pen)
            for a, b in overlay.edges:
                if a < len(points) and b < len(points):
                    painter.drawLine(points[a], points[b])
        finally:
            painter.end()
