from __future__ import annotations
import logging
import os
import sys
import signal

from PySide6.QtWidgets import QApplication, QSystemTrayIcon, QMenu
from PySide6.QtGui import QAction, QCursor
from PySide6.QtCore import QTimer

from .audio import QtAudioPlayer, QtSpeaker
from .db import connect, migrate
from .notifications import Notifier
from .playback import PlaybackOrchestrator, RingtoneCatalog
from .repository import Repository
from .resources import tray_icon, ringtones_dir
from .scheduler import Scheduler
from .ui.panel import TrayPanel
from .ui.settings import SettingsDialog

LOG_LEVEL_ENV = "WEEKLY_SCHEDULE_LOG_LEVEL"

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    level = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def main() -> int:
    setup_logging()

    app = QApplication(sys.argv)
    app.setWindowIcon(tray_icon())
    app.setQuitOnLastWindowClosed(False)

    # Qt's event loop eats SIGINT unless we pump it. This makes Ctrl-C behave.
    signal.signal(signal.SIGINT, signal.SIG_DFL)
    _sig_timer = QTimer()
    _sig_timer.start(250)
    _sig_timer.timeout.connect(lambda: None)

    conn = connect()
    migrate(conn)
    repo = Repository(conn)

    tray = QSystemTrayIcon()
    tray.setIcon(tray_icon())
    tray.setToolTip("Lịch Trình Tuần")

    playback = PlaybackOrchestrator(
        audio_factory=QtAudioPlayer,
        speaker=QtSpeaker(),
        catalog=RingtoneCatalog.with_directory(ringtones_dir()),
        defer=QTimer.singleShot,
    )
    notifier = Notifier(tray)
    panel = TrayPanel(repo)

    scheduler = Scheduler(repo)
    scheduler.notifications_due.connect(
        lambda due: playback.play([d.text for d in due], repo.get_settings())
    )
    scheduler.popup_ready.connect(notifier.show)
    scheduler.notifications_due.connect(lambda _due: panel.refresh())
    panel.profile_changed.connect(lambda name: logger.info("Active profile is now %r", name))

    tray.messageClicked.connect(lambda: _show_panel(panel))

    menu = QMenu()

    act_open = QAction("Mở")
    act_open.triggered.connect(lambda: _show_panel(panel))
    menu.addAction(act_open)

    menu.addSeparator()

    act_settings = QAction("Cài đặt…")
    act_settings.triggered.connect(lambda: _open_settings(repo, playback, panel))
    menu.addAction(act_settings)

    menu.addSeparator()

    def quit_cleanly():
        # No tick may run after teardown.
        scheduler.stop()
        notifier.dismiss()
        tray.hide()
        panel.close()
        app.quit()

    act_quit = QAction("Thoát")
    act_quit.triggered.connect(quit_cleanly)
    menu.addAction(act_quit)

    tray.setContextMenu(menu)

    if sys.platform.startswith("win"):
        def _show_menu_on_left_click(reason: QSystemTrayIcon.ActivationReason):
            if reason == QSystemTrayIcon.ActivationReason.Trigger:
                cm = tray.contextMenu()
                if cm is not None:
                    cm.popup(QCursor.pos())

        tray.activated.connect(_show_menu_on_left_click)

    app.aboutToQuit.connect(scheduler.stop)
    scheduler.start()
    logger.info("Scheduler started for profile %r", repo.active_profile())

    tray.show()
    return app.exec()


def _show_panel(panel: TrayPanel) -> None:
    panel.refresh()
    panel.show()
    panel.raise_()
    panel.activateWindow()


def _open_settings(repo: Repository, playback: PlaybackOrchestrator, panel: TrayPanel) -> None:
    dlg = SettingsDialog(repo, playback, parent=panel)
    if dlg.exec():
        panel.refresh()


if __name__ == "__main__":
    sys.exit(main())
