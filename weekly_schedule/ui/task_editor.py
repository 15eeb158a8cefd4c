from __future__ import annotations
from typing import Optional, List
from PySide6.QtCore import QTime
from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QLabel, QLineEdit, QPushButton,
    QCheckBox, QTimeEdit, QComboBox, QMessageBox, QInputDialog, QColorDialog
)

from ..clock import parse_hhmm
from ..repository import Repository


# 0=Sun ... 6=Sat
WEEKDAY_LABELS = ["CN", "T2", "T3", "T4", "T5", "T6", "T7"]


class TaskEditor(QDialog):
    def __init__(self, repo: Repository, task_id: Optional[str] = None, parent=None):
        super().__init__(parent)
        self.repo = repo
        self.task_id = task_id
        self.setWindowTitle("Chỉnh Sửa Lịch Trình" if task_id else "Thêm Lịch Trình")
        self.setMinimumWidth(420)

        layout = QVBoxLayout(self)

        layout.addWidget(QLabel("Thời gian"))
        self.time = QTimeEdit()
        self.time.setDisplayFormat("HH:mm")
        self.time.setTime(QTime(9, 0))
        layout.addWidget(self.time)

        layout.addWidget(QLabel("Nội dung"))
        self.text = QLineEdit()
        layout.addWidget(self.text)

        layout.addWidget(QLabel("Phân loại"))
        cat_row = QHBoxLayout()
        self.category = QComboBox()
        cat_row.addWidget(self.category, 1)
        self.btn_add_category = QPushButton("Thêm loại mới")
        self.btn_add_category.clicked.connect(self._add_category)
        cat_row.addWidget(self.btn_add_category)
        layout.addLayout(cat_row)
        self._fill_categories()

        layout.addWidget(QLabel("Các ngày trong tuần"))
        wd_row = QHBoxLayout()
        self.weekday_checks: List[QCheckBox] = []
        for lab in WEEKDAY_LABELS:
            cb = QCheckBox(lab)
            self.weekday_checks.append(cb)
            wd_row.addWidget(cb)
        layout.addLayout(wd_row)

        btns = QHBoxLayout()
        self.btn_cancel = QPushButton("Hủy")
        self.btn_cancel.clicked.connect(self.reject)
        btns.addWidget(self.btn_cancel)

        self.btn_save = QPushButton("Lưu")
        self.btn_save.clicked.connect(self.save)
        btns.addWidget(self.btn_save)
        layout.addLayout(btns)

        if task_id is not None:
            self._load(task_id)

    def _fill_categories(self, select_id: Optional[str] = None) -> None:
        self.category.clear()
        self.category.addItem("Không có", None)
        for c in self.repo.list_categories():
            self.category.addItem(c.name, c.id)
        if select_id is not None:
            idx = self.category.findData(select_id)
            if idx >= 0:
                self.category.setCurrentIndex(idx)

    def _add_category(self) -> None:
        name, ok = QInputDialog.getText(self, "Thêm loại mới", "Tên loại")
        if not ok or not name.strip():
            return
        color = QColorDialog.getColor(parent=self)
        cat = self.repo.create_category(name, color.name() if color.isValid() else "#888888")
        self._fill_categories(select_id=cat.id)

    def _load(self, task_id: str) -> None:
        t = self.repo.get_task(task_id)
        tm = parse_hhmm(t.time)
        self.time.setTime(QTime(tm.hour, tm.minute))
        self.text.setText(t.text)
        self._fill_categories(select_id=t.category_id)

        # weekday is fixed once created
        for i, cb in enumerate(self.weekday_checks):
            cb.setChecked(i == t.day)
            cb.setEnabled(False)

    def save(self) -> None:
        text = self.text.text().strip()
        if not text:
            QMessageBox.warning(self, "Nội dung", "Vui lòng nhập nội dung.")
            return
        hh = self.time.time().hour()
        mm = self.time.time().minute()
        hhmm = f"{hh:02d}:{mm:02d}"
        category_id = self.category.currentData()

        if self.task_id is None:
            days = [i for i, cb in enumerate(self.weekday_checks) if cb.isChecked()]
            if not days:
                QMessageBox.warning(self, "Các ngày trong tuần", "Vui lòng chọn ít nhất một ngày.")
                return
            self.repo.create_tasks(days=days, time_hhmm=hhmm, text=text, category_id=category_id)
        else:
            self.repo.update_task(self.task_id, time_hhmm=hhmm, text=text, category_id=category_id)
        self.accept()
