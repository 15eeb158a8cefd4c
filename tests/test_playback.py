import logging

import pytest

from weekly_schedule.models import NotificationSettings
from weekly_schedule.playback import (
    DEFAULT_RINGTONES,
    FALLBACK_LOCALE,
    PREVIEW_TEXT,
    PlaybackError,
    PlaybackOrchestrator,
    Ringtone,
    RingtoneCatalog,
    Voice,
)


class FakeAudio:
    def __init__(self, log, fail=False):
        self.log = log
        self.fail = fail

    def play(self, location, volume):
        if self.fail:
            raise PlaybackError("autoplay blocked")
        self.log.append(("play", location, volume))

    def stop(self):
        self.log.append(("stop",))


class FakeSpeaker:
    def __init__(self, available=True, voices=()):
        self._available = available
        self._voices = list(voices)
        self.cancelled = 0
        self.said = []

    @property
    def available(self):
        return self._available

    def voices(self):
        return self._voices

    def cancel(self):
        self.cancelled += 1

    def say(self, text, voice, locale, volume):
        self.said.append((text, voice, locale, volume))


class FakeDefer:
    def __init__(self):
        self.calls = []

    def __call__(self, ms, callback):
        self.calls.append((ms, callback))

    def run_all(self):
        for _ms, cb in sorted(self.calls, key=lambda c: c[0]):
            cb()
        self.calls = []


@pytest.fixture
def audio_log():
    return []


def _orchestrator(audio_log, speaker=None, fail=False, catalog=None):
    defer = FakeDefer()
    orch = PlaybackOrchestrator(
        audio_factory=lambda: FakeAudio(audio_log, fail=fail),
        speaker=speaker or FakeSpeaker(),
        catalog=catalog or RingtoneCatalog(),
        defer=defer,
    )
    return orch, defer


def test_ringtone_then_speech_timing(audio_log):
    speaker = FakeSpeaker()
    orch, defer = _orchestrator(audio_log, speaker)
    s = NotificationSettings(ringtone_duration=3, volume=0.5)

    orch.play(["Đã đến giờ: A", "Đã đến giờ: B"], s)

    assert speaker.cancelled == 1
    assert audio_log == [("play", DEFAULT_RINGTONES[0].location, 0.5)]
    assert sorted(ms for ms, _ in defer.calls) == [3000, 3500]
    assert speaker.said == []

    defer.run_all()
    assert audio_log[-1] == ("stop",)
    assert [t for t, *_ in speaker.said] == ["Đã đến giờ: A", "Đã đến giờ: B"]
    assert all(vol == 0.5 for *_, vol in speaker.said)


def test_unknown_voice_falls_back_to_default_locale(audio_log):
    speaker = FakeSpeaker(voices=[Voice(id="Linh", name="Linh", locale="vi-VN")])
    orch, defer = _orchestrator(audio_log, speaker)
    orch.play(["x"], NotificationSettings(voice="nope"))
    defer.run_all()
    assert speaker.said == [("x", None, FALLBACK_LOCALE, 0.8)]


def test_configured_voice_is_used(audio_log):
    voice = Voice(id="Samantha", name="Samantha", locale="en-US")
    speaker = FakeSpeaker(voices=[voice])
    orch, defer = _orchestrator(audio_log, speaker)
    orch.play(["x"], NotificationSettings(voice="Samantha"))
    defer.run_all()
    assert speaker.said == [("x", voice, "en-US", 0.8)]


def test_playback_error_is_logged_and_speech_still_runs(audio_log, caplog):
    speaker = FakeSpeaker()
    orch, defer = _orchestrator(audio_log, speaker, fail=True)

    with caplog.at_level(logging.WARNING, logger="weekly_schedule.playback"):
        orch.play(["still spoken"], NotificationSettings(ringtone_duration=2))

    assert "autoplay blocked" in caplog.text
    assert [ms for ms, _ in defer.calls] == [2500]
    defer.run_all()
    assert [t for t, *_ in speaker.said] == ["still spoken"]


def test_no_speech_engine_skips_phase_two(audio_log):
    speaker = FakeSpeaker(available=False)
    orch, defer = _orchestrator(audio_log, speaker)
    orch.play(["x"], NotificationSettings())
    defer.run_all()

    assert speaker.cancelled == 0
    assert speaker.said == []
    assert audio_log[0][0] == "play"


def test_empty_batch_does_nothing(audio_log):
    speaker = FakeSpeaker()
    orch, defer = _orchestrator(audio_log, speaker)
    orch.play([], NotificationSettings())
    assert audio_log == [] and defer.calls == [] and speaker.cancelled == 0


def test_new_batch_cancels_speech_but_not_ringtone_stop(audio_log):
    speaker = FakeSpeaker()
    orch, defer = _orchestrator(audio_log, speaker)
    orch.play(["first"], NotificationSettings())
    orch.play(["second"], NotificationSettings())

    assert speaker.cancelled == 2
    # both ringtone stops still scheduled
    defer.run_all()
    assert audio_log.count(("stop",)) == 2


def test_preview_speaks_fixed_sentence(audio_log):
    speaker = FakeSpeaker()
    orch, defer = _orchestrator(audio_log, speaker)
    orch.preview(NotificationSettings())
    defer.run_all()
    assert [t for t, *_ in speaker.said] == [PREVIEW_TEXT]


def test_ringtone_resolution_chain():
    custom = Ringtone(name="Chime", location="/tmp/chime.mp3")
    catalog = RingtoneCatalog([*DEFAULT_RINGTONES, custom])

    assert catalog.resolve("Chime") == custom
    assert catalog.resolve("/tmp/chime.mp3") == custom  # legacy: stored location
    assert catalog.resolve("deleted tone") == DEFAULT_RINGTONES[0]


def test_ringtone_resolution_without_builtin_uses_first():
    only = Ringtone(name="Only", location="/tmp/only.wav")
    assert RingtoneCatalog([only]).resolve("missing") == only
    assert RingtoneCatalog([]).resolve("missing") is None


def test_catalog_picks_up_audio_files(tmp_path):
    (tmp_path / "bell.mp3").write_bytes(b"")
    (tmp_path / "notes.txt").write_text("not audio")
    catalog = RingtoneCatalog.with_directory(tmp_path)

    names = [r.name for r in catalog.all()]
    assert names == [DEFAULT_RINGTONES[0].name, "bell"]


def test_no_ringtone_still_speaks(audio_log):
    speaker = FakeSpeaker()
    orch, defer = _orchestrator(audio_log, speaker, catalog=RingtoneCatalog([]))
    orch.play(["x"], NotificationSettings())
    defer.run_all()
    assert audio_log == []
    assert [t for t, *_ in speaker.said] == ["x"]


class BrokenAudio:
    def play(self, location, volume):
        raise RuntimeError("device gone")

    def stop(self):
        raise AssertionError("never started")


def test_unexpected_audio_error_does_not_cancel_speech(caplog):
    speaker = FakeSpeaker()
    defer = FakeDefer()
    orch = PlaybackOrchestrator(
        audio_factory=BrokenAudio,
        speaker=speaker,
        catalog=RingtoneCatalog(),
        defer=defer,
    )

    with caplog.at_level(logging.ERROR, logger="weekly_schedule.playback"):
        orch.play(["still spoken"], NotificationSettings())

    assert "device gone" in caplog.text
    assert [ms for ms, _ in defer.calls] == [3500]
    defer.run_all()
    assert [t for t, *_ in speaker.said] == ["still spoken"]


def test_audio_factory_failure_does_not_cancel_speech(caplog):
    def no_device():
        raise OSError("no output device")

    speaker = FakeSpeaker()
    defer = FakeDefer()
    orch = PlaybackOrchestrator(
        audio_factory=no_device,
        speaker=speaker,
        catalog=RingtoneCatalog(),
        defer=defer,
    )

    with caplog.at_level(logging.ERROR, logger="weekly_schedule.playback"):
        orch.play(["x"], NotificationSettings(ringtone_duration=1))

    assert "no output device" in caplog.text
    defer.run_all()
    assert [t for t, *_ in speaker.said] == ["x"]
