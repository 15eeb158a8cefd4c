from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from PySide6.QtCore import QLocale, QUrl
from PySide6.QtMultimedia import QAudioOutput, QMediaPlayer
from PySide6.QtTextToSpeech import QTextToSpeech

from .playback import PlaybackError, Voice

logger = logging.getLogger(__name__)


def _to_url(location: str) -> QUrl:
    if "://" in location:
        return QUrl(location)
    p = Path(location)
    if not p.is_file():
        raise PlaybackError(f"ringtone file not found: {location}")
    return QUrl.fromLocalFile(str(p))


class QtAudioPlayer:
    """One ringtone playback. Errors reported by the backend are logged."""

    def __init__(self):
        self.output = QAudioOutput()
        self.player = QMediaPlayer()
        self.player.setAudioOutput(self.output)
        self.player.errorOccurred.connect(self._on_error)

    def play(self, location: str, volume: float) -> None:
        url = _to_url(location)
        self.output.setVolume(max(0.0, min(1.0, float(volume))))
        self.player.setSource(url)
        self.player.play()

    def stop(self) -> None:
        self.player.stop()
        self.player.setPosition(0)

    def _on_error(self, error, message: str) -> None:
        logger.warning("Ringtone playback failed (%s): %s", error, message)


class QtSpeaker:
    """QTextToSpeech wrapper; utterances are queued with enqueue()."""

    def __init__(self):
        self._tts: Optional[QTextToSpeech] = None
        if QTextToSpeech.availableEngines():
            self._tts = QTextToSpeech()
            self._tts.errorOccurred.connect(self._on_error)

    @property
    def available(self) -> bool:
        return self._tts is not None and self._tts.state() != QTextToSpeech.State.Error

    def voices(self) -> Sequence[Voice]:
        if self._tts is None:
            return []
        out: List[Voice] = []
        for v in self._tts.availableVoices():
            out.append(Voice(id=v.name(), name=v.name(), locale=v.locale().bcp47Name()))
        return out

    def cancel(self) -> None:
        if self._tts is not None:
            self._tts.stop()

    def say(self, text: str, voice: Optional[Voice], locale: str, volume: float) -> None:
        if self._tts is None:
            return
        self._tts.setLocale(QLocale(locale))
        if voice is not None:
            for v in self._tts.availableVoices():
                if v.name() == voice.id:
                    self._tts.setVoice(v)
                    break
        self._tts.setVolume(max(0.0, min(1.0, float(volume))))
        self._tts.enqueue(text)

    def _on_error(self, reason, message: str) -> None:
        logger.warning("Speech synthesis error (%s): %s", reason, message)
