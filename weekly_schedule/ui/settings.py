from __future__ import annotations
from PySide6.QtCore import Qt, QTime
from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QLabel, QCheckBox, QHBoxLayout, QPushButton, QSpinBox,
    QTimeEdit, QComboBox, QLineEdit, QSlider, QGroupBox, QFormLayout
)

from ..clock import parse_hhmm
from ..models import NotificationSettings
from ..playback import PlaybackOrchestrator
from ..repository import Repository

PRE_NOTIFICATION_CHOICES = [0, 5, 10, 15, 30]


def pre_minutes_label(minutes: int) -> str:
    return "Đúng giờ" if minutes == 0 else f"{minutes} phút trước"


class _OptionalTime(QHBoxLayout):
    """Checkbox + time editor; unchecked means the milestone is unset."""

    def __init__(self, value: str):
        super().__init__()
        self.enabled = QCheckBox()
        self.edit = QTimeEdit()
        self.edit.setDisplayFormat("HH:mm")
        if value:
            t = parse_hhmm(value)
            self.edit.setTime(QTime(t.hour, t.minute))
            self.enabled.setChecked(True)
        self.edit.setEnabled(self.enabled.isChecked())
        self.enabled.toggled.connect(self.edit.setEnabled)
        self.addWidget(self.enabled)
        self.addWidget(self.edit, 1)

    def value(self) -> str:
        if not self.enabled.isChecked():
            return ""
        t = self.edit.time()
        return f"{t.hour():02d}:{t.minute():02d}"


class SettingsDialog(QDialog):
    def __init__(self, repo: Repository, playback: PlaybackOrchestrator, parent=None):
        super().__init__(parent)
        self.repo = repo
        self.playback = playback
        self.setWindowTitle("Cài Đặt Thông Báo")
        self.setMinimumWidth(420)

        s = self.repo.get_settings()
        layout = QVBoxLayout(self)

        # --- Sound & voice ---
        sound = QFormLayout()
        self.ringtone = QComboBox()
        for r in self.playback.catalog.all():
            self.ringtone.addItem(r.name, r.name)
        resolved = self.playback.catalog.resolve(s.ringtone)
        if resolved is not None:
            self.ringtone.setCurrentIndex(max(0, self.ringtone.findData(resolved.name)))
        sound.addRow("Nhạc chuông", self.ringtone)

        self.duration = QSpinBox()
        self.duration.setRange(1, 60)
        self.duration.setValue(s.ringtone_duration)
        sound.addRow("Thời lượng chuông (giây)", self.duration)

        self.voice = QComboBox()
        self.voice.addItem("Mặc định", "default")
        for v in self.playback.speaker.voices():
            self.voice.addItem(f"{v.name} ({v.locale})", v.id)
        self.voice.setCurrentIndex(max(0, self.voice.findData(s.voice)))
        sound.addRow("Giọng đọc", self.voice)

        self.volume = QSlider(Qt.Horizontal)
        self.volume.setRange(0, 100)
        self.volume.setValue(int(round(s.volume * 100)))
        sound.addRow("Âm lượng", self.volume)

        self.prefix = QLineEdit(s.notification_prefix)
        sound.addRow("Văn bản lời nhắc chính", self.prefix)
        layout.addLayout(sound)

        # --- Pre-notification ---
        pre_box = QGroupBox("Cài đặt nhắc trước (toàn cục)")
        pre = QFormLayout(pre_box)
        self.pre_enabled = QCheckBox("Bật thông báo nhắc trước")
        self.pre_enabled.setChecked(s.pre_notification_enabled)
        pre.addRow(self.pre_enabled)
        self.pre_minutes = QComboBox()
        choices = sorted(set(PRE_NOTIFICATION_CHOICES + [s.pre_notification_minutes]))
        for m in choices:
            self.pre_minutes.addItem(pre_minutes_label(m), m)
        self.pre_minutes.setCurrentIndex(self.pre_minutes.findData(s.pre_notification_minutes))
        pre.addRow("Thời gian nhắc trước", self.pre_minutes)
        self.pre_prefix = QLineEdit(s.pre_notification_prefix)
        pre.addRow("Văn bản lời nhắc trước", self.pre_prefix)
        layout.addWidget(pre_box)

        # --- Workday ---
        work_box = QGroupBox("Thông báo giờ làm việc")
        work = QFormLayout(work_box)
        self.work_enabled = QCheckBox("Bật thông báo theo giờ làm việc")
        self.work_enabled.setChecked(s.workday_notifications_enabled)
        work.addRow(self.work_enabled)
        self.user_name = QLineEdit(s.user_name)
        work.addRow("Tên/Biệt danh của bạn", self.user_name)
        self.work_start = _OptionalTime(s.work_start_time)
        work.addRow("Bắt đầu làm việc", self.work_start)
        self.lunch_start = _OptionalTime(s.lunch_start_time)
        work.addRow("Nghỉ trưa", self.lunch_start)
        self.lunch_end = _OptionalTime(s.lunch_end_time)
        work.addRow("Hết nghỉ trưa", self.lunch_end)
        self.work_end = _OptionalTime(s.work_end_time)
        work.addRow("Kết thúc làm việc", self.work_end)
        layout.addWidget(work_box)

        btns = QHBoxLayout()
        preview = QPushButton("Nghe thử")
        preview.clicked.connect(self.preview)
        btns.addWidget(preview)
        btns.addStretch(1)

        save = QPushButton("Lưu")
        save.clicked.connect(self.save)
        btns.addWidget(save)

        cancel = QPushButton("Đóng")
        cancel.clicked.connect(self.reject)
        btns.addWidget(cancel)

        layout.addLayout(btns)

    def collect(self) -> NotificationSettings:
        return self.repo.get_settings().with_changes(
            ringtone=self.ringtone.currentData(),
            ringtone_duration=int(self.duration.value()),
            voice=self.voice.currentData(),
            volume=self.volume.value() / 100.0,
            notification_prefix=self.prefix.text(),
            pre_notification_enabled=self.pre_enabled.isChecked(),
            pre_notification_minutes=int(self.pre_minutes.currentData()),
            pre_notification_prefix=self.pre_prefix.text(),
            workday_notifications_enabled=self.work_enabled.isChecked(),
            user_name=self.user_name.text().strip(),
            work_start_time=self.work_start.value(),
            lunch_start_time=self.lunch_start.value(),
            lunch_end_time=self.lunch_end.value(),
            work_end_time=self.work_end.value(),
        )

    def preview(self) -> None:
        self.playback.preview(self.collect())

    def save(self) -> None:
        self.repo.save_settings(self.collect())
        self.accept()
