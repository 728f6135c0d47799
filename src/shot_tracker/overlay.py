"""
overlay.py - Stats card drawn over the camera preview.

Three columns: Shots, Makes, Percentage.
"""

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import QFrame, QHBoxLayout, QLabel, QVBoxLayout, QWidget

from .config import CARD_CSS, FG_LABEL, FG_VALUE
from .shot_counter import ShotStats


def _lbl_style(color, size, bold=False) -> str:
    w = "bold" if bold else "normal"
    return f"color:{color}; font-size:{size}pt; font-weight:{w}; background:transparent;"


class StatColumn(QWidget):
    """Big value over a small caption."""

    def __init__(self, label, value="0", parent=None):
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(2)

        self.value_label = QLabel(value)
        self.value_label.setStyleSheet(_lbl_style(FG_VALUE, 32, bold=True))
        self.value_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.value_label)

        self.caption_label = QLabel(label)
        self.caption_label.setStyleSheet(_lbl_style(FG_LABEL, 14))
        self.caption_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.caption_label)

    def set_value(self, value):
        self.value_label.setText(value)

    def value(self) -> str:
        return self.value_label.text()


class ShotCounterOverlay(QFrame):
    """Card showing the session totals."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("shotCounterOverlay")
        self.setStyleSheet(f"#shotCounterOverlay {{ {CARD_CSS} }}")

        row = QHBoxLayout(self)
        row.setContentsMargins(16, 16, 16, 16)

        self.shots_column = StatColumn("Shots")
        self.makes_column = StatColumn("Makes")
        self.pct_column = StatColumn("Percentage", "0%")

        row.addStretch()
        for column in (self.shots_column, self.makes_column, self.pct_column):
            row.addWidget(column)
            row.addStretch()

    def set_stats(self, stats: ShotStats):
        self.shots_column.set_value(str(stats.shots))
        self.makes_column.set_value(str(stats.makes))
        self.pct_column.set_value(f"{stats.percentage}%")
