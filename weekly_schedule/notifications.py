from __future__ import annotations
from typing import Optional

from PySide6.QtWidgets import QSystemTrayIcon

from .models import PopupPayload
from .ui.popup import NotificationPopup


class Notifier:
    """Shows one popup at a time; a newer payload replaces the one on screen."""

    def __init__(self, tray: QSystemTrayIcon):
        self.tray = tray
        self.popup: Optional[NotificationPopup] = None

    @property
    def active(self) -> Optional[PopupPayload]:
        return self.popup.payload if self.popup is not None else None

    def show(self, payload: PopupPayload) -> None:
        self.dismiss()

        popup = NotificationPopup(payload)
        popup.closed.connect(self._on_closed)
        self.popup = popup
        popup.show()
        popup.raise_()
        popup.activateWindow()

        # Cross-platform "native-ish" balloon/toast
        self.tray.showMessage("Lịch trình", payload.message, QSystemTrayIcon.MessageIcon.Information, 10_000)

    def dismiss(self) -> None:
        if self.popup is not None:
            popup, self.popup = self.popup, None
            popup.close()

    def _on_closed(self, payload_id: str) -> None:
        if self.popup is not None and self.popup.payload.id == payload_id:
            self.popup = None
