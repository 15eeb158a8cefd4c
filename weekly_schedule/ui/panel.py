from __future__ import annotations
from typing import Optional

from PySide6.QtCore import Qt, QTimer, Signal
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QListWidget, QListWidgetItem,
    QMessageBox, QMenu, QComboBox, QInputDialog
)

from ..clock import day_index, now_local
from ..db import DEFAULT_PROFILE_NAME
from ..models import Task
from ..repository import Repository
from .task_editor import TaskEditor, WEEKDAY_LABELS


class TrayPanel(QDialog):
    profile_changed = Signal(str)

    def __init__(self, repo: Repository, parent=None):
        super().__init__(parent)
        self.repo = repo
        self.setWindowTitle("Lịch Trình Tuần Của Tôi")
        self.setWindowFlags(self.windowFlags() | Qt.WindowStaysOnTopHint)
        self.setMinimumWidth(520)
        self.setAttribute(Qt.WA_DeleteOnClose, False)

        # today's list changes at midnight even without edits
        self._refresh_timer = QTimer(self)
        self._refresh_timer.setInterval(60_000)
        self._refresh_timer.timeout.connect(self.refresh)

        self.layout = QVBoxLayout(self)

        # --- Profile row ---
        profile_row = QHBoxLayout()
        profile_row.addWidget(QLabel("Hồ sơ"))
        self.profile = QComboBox()
        self.profile.activated.connect(self._switch_profile)
        profile_row.addWidget(self.profile, 1)
        btn_add_profile = QPushButton("Thêm hồ sơ")
        btn_add_profile.clicked.connect(self.add_profile)
        profile_row.addWidget(btn_add_profile)
        btn_delete_profile = QPushButton("Xóa hồ sơ")
        btn_delete_profile.clicked.connect(self.delete_profile)
        profile_row.addWidget(btn_delete_profile)
        self.layout.addLayout(profile_row)

        self.today_header = QLabel("Công Việc Hôm Nay")
        self.layout.addWidget(self.today_header)
        self.today = QListWidget()
        self.today.itemDoubleClicked.connect(self._toggle_item)
        self.layout.addWidget(self.today)

        self.layout.addWidget(QLabel("Cả tuần"))
        self.list = QListWidget()
        self.list.setContextMenuPolicy(Qt.CustomContextMenu)
        self.list.customContextMenuRequested.connect(self._show_task_menu_at)
        self.list.itemDoubleClicked.connect(lambda _item: self.edit_task())
        self.layout.addWidget(self.list)

        # --- Manage tasks row ---
        manage_row = QHBoxLayout()

        self.btn_add_task = QPushButton("Thêm…")
        self.btn_add_task.clicked.connect(self.add_task)
        manage_row.addWidget(self.btn_add_task)

        self.btn_edit_task = QPushButton("Sửa…")
        self.btn_edit_task.clicked.connect(self.edit_task)
        manage_row.addWidget(self.btn_edit_task)

        self.btn_delete_task = QPushButton("Xóa")
        self.btn_delete_task.clicked.connect(self.delete_task)
        manage_row.addWidget(self.btn_delete_task)

        self.layout.addLayout(manage_row)

        self.footer = QLabel("Nhấp đúp một công việc hôm nay để đánh dấu hoàn thành")
        self.footer.setStyleSheet("""
            QLabel {
                color: #888;
                font-size: 11px;
                padding-top: 6px;
            }
        """)
        self.footer.setAlignment(Qt.AlignCenter)
        self.layout.addWidget(self.footer)

        self.refresh()

    def selected_task_id(self) -> Optional[str]:
        item = self.list.currentItem()
        if not item:
            return None
        return item.data(Qt.UserRole)

    def _item_for(self, t: Task, label: str) -> QListWidgetItem:
        cat = self.repo.category_for(t)
        text = label
        if cat is not None:
            text += f"  [{cat.name}]"
        it = QListWidgetItem(text)
        it.setData(Qt.UserRole, t.id)
        if cat is not None:
            it.setForeground(QColor(cat.color))
        return it

    def refresh(self) -> None:
        selected_id = self.selected_task_id()
        today_idx = day_index(now_local())

        self._refresh_profiles()

        self.today.clear()
        todays = self.repo.tasks_for_day(today_idx)
        if not todays:
            any_today = any(t.day == today_idx for t in self.repo.list_tasks())
            self.today.addItem("Tất cả công việc đã hoàn thành! 🎉" if any_today else "Hôm nay không có công việc nào.")
        for t in todays:
            self.today.addItem(self._item_for(t, f"{t.time}  {t.text}"))

        tasks = sorted(self.repo.list_tasks(), key=lambda t: (t.day, t.time))

        self.list.blockSignals(True)
        try:
            self.list.clear()
            selected_row = None
            for idx, t in enumerate(tasks):
                mark = "✓ " if t.is_completed else ""
                it = self._item_for(t, f"{WEEKDAY_LABELS[t.day]} {t.time}  {mark}{t.text}")
                self.list.addItem(it)
                if selected_id is not None and t.id == selected_id:
                    selected_row = idx
            if selected_row is not None:
                self.list.setCurrentRow(selected_row)
        finally:
            self.list.blockSignals(False)

    def _refresh_profiles(self) -> None:
        self.profile.blockSignals(True)
        try:
            self.profile.clear()
            active = self.repo.active_profile()
            for name in self.repo.list_profiles():
                self.profile.addItem(name)
            self.profile.setCurrentText(active)
        finally:
            self.profile.blockSignals(False)

    def _show_task_menu_at(self, pos) -> None:
        item = self.list.itemAt(pos)
        if item is None:
            return

        # Ensure the right-clicked item becomes selected
        self.list.setCurrentItem(item)
        tid = item.data(Qt.UserRole)
        t = self.repo.get_task(tid)

        menu = QMenu(self)
        label = "Bỏ đánh dấu hoàn thành" if t.is_completed else "Đánh dấu hoàn thành"
        menu.addAction(label).triggered.connect(lambda: self._toggle_complete(tid))
        menu.addSeparator()
        menu.addAction("Sửa").triggered.connect(self.edit_task)
        menu.addAction("Xóa").triggered.connect(self.delete_task)
        menu.exec(self.list.mapToGlobal(pos))

    # -------- actions ----------
    def _toggle_item(self, item: QListWidgetItem) -> None:
        tid = item.data(Qt.UserRole)
        if tid is None:
            return
        self._toggle_complete(tid)

    def _toggle_complete(self, task_id: str) -> None:
        self.repo.toggle_complete(task_id)
        self.refresh()

    def add_task(self) -> None:
        dlg = TaskEditor(self.repo, task_id=None, parent=self)
        if dlg.exec():
            self.refresh()

    def edit_task(self) -> None:
        tid = self.selected_task_id()
        if tid is None:
            QMessageBox.information(self, "Chưa chọn", "Hãy chọn một công việc trước.")
            return
        dlg = TaskEditor(self.repo, task_id=tid, parent=self)
        if dlg.exec():
            self.refresh()

    def delete_task(self) -> None:
        tid = self.selected_task_id()
        if tid is None:
            QMessageBox.information(self, "Chưa chọn", "Hãy chọn một công việc trước.")
            return

        confirm = QMessageBox.question(self, "Xóa", "Xóa công việc đã chọn?")
        if confirm == QMessageBox.StandardButton.Yes:
            self.repo.delete_task(tid)
            self.refresh()

    def add_profile(self) -> None:
        name, ok = QInputDialog.getText(self, "Thêm hồ sơ", "Tên hồ sơ mới...")
        if not ok or not name.strip():
            return
        self.repo.add_profile(name)
        self.profile_changed.emit(self.repo.active_profile())
        self.refresh()

    def delete_profile(self) -> None:
        name = self.repo.active_profile()
        if name == DEFAULT_PROFILE_NAME:
            QMessageBox.information(self, "Xóa hồ sơ", "Không thể xóa hồ sơ mặc định.")
            return
        confirm = QMessageBox.question(
            self,
            "Xóa hồ sơ",
            "Bạn có chắc muốn xóa hồ sơ này không? Tất cả lịch trình và cài đặt "
            "của hồ sơ này sẽ bị mất vĩnh viễn.",
        )
        if confirm == QMessageBox.StandardButton.Yes:
            self.repo.delete_profile(name)
            self.profile_changed.emit(self.repo.active_profile())
            self.refresh()

    def _switch_profile(self, index: int) -> None:
        name = self.profile.itemText(index)
        if name == self.repo.active_profile():
            return
        self.repo.switch_profile(name)
        self.profile_changed.emit(name)
        self.refresh()

    def closeEvent(self, event):
        event.ignore()
        self.hide()

    def showEvent(self, event) -> None:
        super().showEvent(event)
        self._refresh_timer.start()
        self.refresh()  # immediate refresh on open

    def hideEvent(self, event) -> None:
        super().hideEvent(event)
        self._refresh_timer.stop()
