from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Sequence

from .models import NotificationSettings

logger = logging.getLogger(__name__)

SPEECH_BUFFER_MS = 500
FALLBACK_LOCALE = "vi-VN"
PREVIEW_TEXT = "Đây là giọng nói thông báo của bạn."
AUDIO_SUFFIXES = (".mp3", ".wav", ".ogg", ".m4a", ".flac")


class PlaybackError(RuntimeError):
    """The audio engine refused to play (missing resource, device, policy...)."""


@dataclass(frozen=True)
class Ringtone:
    name: str
    location: str  # URL or local file path


DEFAULT_RINGTONES = [
    Ringtone(name="Báo thức số", location="https://cdn.pixabay.com/audio/2021/08/04/audio_12b0c7443c.mp3"),
]


@dataclass(frozen=True)
class Voice:
    id: str
    name: str
    locale: str


class AudioPlayer(Protocol):
    def play(self, location: str, volume: float) -> None: ...
    def stop(self) -> None: ...


class Speaker(Protocol):
    @property
    def available(self) -> bool: ...
    def voices(self) -> Sequence[Voice]: ...
    def cancel(self) -> None: ...
    def say(self, text: str, voice: Optional[Voice], locale: str, volume: float) -> None: ...


Defer = Callable[[int, Callable[[], None]], None]


class RingtoneCatalog:
    def __init__(self, ringtones: Sequence[Ringtone] = DEFAULT_RINGTONES):
        self._ringtones: List[Ringtone] = list(ringtones)

    @classmethod
    def with_directory(cls, directory: Path) -> "RingtoneCatalog":
        """Built-in ringtones plus audio files dropped into `directory`."""
        extra: List[Ringtone] = []
        if directory.is_dir():
            for p in sorted(directory.iterdir()):
                if p.is_file() and p.suffix.lower() in AUDIO_SUFFIXES:
                    extra.append(Ringtone(name=p.stem, location=str(p)))
        return cls([*DEFAULT_RINGTONES, *extra])

    def all(self) -> List[Ringtone]:
        return list(self._ringtones)

    def resolve(self, identifier: str) -> Optional[Ringtone]:
        # Name first; older settings stored the location instead.
        for r in self._ringtones:
            if r.name == identifier:
                return r
        for r in self._ringtones:
            if r.location == identifier:
                return r
        for r in self._ringtones:
            if r.name == DEFAULT_RINGTONES[0].name:
                return r
        return self._ringtones[0] if self._ringtones else None


def resolve_voice(speaker: Speaker, voice_id: str) -> Optional[Voice]:
    for v in speaker.voices():
        if v.id == voice_id:
            return v
    return None


class PlaybackOrchestrator:
    """
    Ringtone first, speech after.

    The ringtone is hard-stopped after `ringtone_duration` seconds and speech
    starts 500 ms later. A new batch cancels pending speech from the previous
    one but leaves that batch's ringtone timer alone.
    """

    def __init__(
        self,
        audio_factory: Callable[[], AudioPlayer],
        speaker: Speaker,
        catalog: RingtoneCatalog,
        defer: Defer,
    ):
        self.audio_factory = audio_factory
        self.speaker = speaker
        self.catalog = catalog
        self.defer = defer

    def play(self, texts: Sequence[str], settings: NotificationSettings) -> None:
        if not texts:
            return
        texts = list(texts)

        if self.speaker.available:
            self.speaker.cancel()

        duration_ms = max(0, int(settings.ringtone_duration)) * 1000
        # Speech is queued even if the ringtone phase fails.
        self.defer(duration_ms + SPEECH_BUFFER_MS, lambda: self._speak(texts, settings))
        self._start_ringtone(settings, duration_ms)

    def preview(self, settings: NotificationSettings) -> None:
        self.play([PREVIEW_TEXT], settings)

    def _start_ringtone(self, settings: NotificationSettings, duration_ms: int) -> None:
        ringtone = self.catalog.resolve(settings.ringtone)
        if ringtone is None:
            logger.warning("No ringtone available; skipping sound")
            return

        try:
            player = self.audio_factory()
            player.play(ringtone.location, settings.volume)
        except PlaybackError as e:
            logger.warning("Could not play ringtone %r: %s", ringtone.name, e)
            return
        except Exception:
            logger.exception("Ringtone phase failed for %r", ringtone.name)
            return
        self.defer(duration_ms, player.stop)

    def _speak(self, texts: List[str], settings: NotificationSettings) -> None:
        if not self.speaker.available:
            logger.debug("Speech engine unavailable; %d message(s) not spoken", len(texts))
            return

        voice = resolve_voice(self.speaker, settings.voice)
        locale = voice.locale if voice else FALLBACK_LOCALE
        for text in texts:
            self.speaker.say(text, voice, locale, settings.volume)
