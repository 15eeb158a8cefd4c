from __future__ import annotations
from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QFont
from PySide6.QtWidgets import QDialog, QVBoxLayout, QLabel, QPushButton, QHBoxLayout

from ..countdown import Countdown
from ..models import PopupPayload


class NotificationPopup(QDialog):
    closed = Signal(str)  # payload id

    def __init__(self, payload: PopupPayload, parent=None):
        super().__init__(parent)
        self.payload = payload
        self.setWindowTitle("Nhắc nhở")
        self.setWindowFlags(self.windowFlags() | Qt.WindowStaysOnTopHint)
        self.setMinimumWidth(480)

        layout = QVBoxLayout(self)

        self.countdown_label: Optional[QLabel] = None
        self.countdown: Optional[Countdown] = None
        if payload.countdown_target is not None:
            self.countdown_label = QLabel("")
            font = QFont("monospace")
            font.setPointSize(64)
            font.setBold(True)
            self.countdown_label.setFont(font)
            self.countdown_label.setAlignment(Qt.AlignCenter)
            layout.addWidget(self.countdown_label)

            self.countdown = Countdown(payload.countdown_target, parent=self)
            self.countdown.updated.connect(self.countdown_label.setText)

        self.message = QLabel(payload.message)
        self.message.setWordWrap(True)
        self.message.setAlignment(Qt.AlignCenter)
        msg_font = self.message.font()
        msg_font.setPointSize(18 if self.countdown is not None else 22)
        self.message.setFont(msg_font)
        layout.addWidget(self.message)

        btns = QHBoxLayout()
        btns.addStretch(1)
        close = QPushButton("Đóng")
        close.clicked.connect(self.close)
        btns.addWidget(close)
        layout.addLayout(btns)

        if self.countdown is not None:
            self.countdown.start()

    def closeEvent(self, event) -> None:
        if self.countdown is not None:
            self.countdown.dismiss()
        self.closed.emit(self.payload.id)
        super().closeEvent(event)
