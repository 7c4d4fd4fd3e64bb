"""Cue synthesis and playback using numpy + QSoundEffect.

The three cues are generated programmatically as WAV files and cached to
disk, so only the first launch pays for synthesis.

Cue names
---------
- ``work_end``: soft C-major chime, notes staggered by 100 ms
- ``break_end``: two short square-wave beeps (A5) to pull you back
- ``complete``: rising arpeggio followed by a held chord
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path
from typing import Callable, Optional

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..timer.state import SessionType

logger = logging.getLogger(__name__)


# ── paths ────────────────────────────────────────────────────────────────

APP_SUPPORT_DIR = Path.home() / ".pomotimer"
SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

WORK_END = "work_end"
BREAK_END = "break_end"
COMPLETE = "complete"

SOUND_NAMES = (WORK_END, BREAK_END, COMPLETE)

SAMPLE_RATE = 44100

C_MAJOR = (523.25, 659.25, 783.99)  # C5, E5, G5
C_MAJOR_OCTAVE = C_MAJOR + (1046.50,)  # + C6


def cue_for_session_end(ended: SessionType) -> str:
    """Work ending gets the chime; any break ending gets the alert."""
    return WORK_END if ended is SessionType.WORK else BREAK_END


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _samples(duration_s: float) -> int:
    return int(SAMPLE_RATE * duration_s)


def _time_axis(duration_s: float) -> np.ndarray:
    return np.linspace(0, duration_s, _samples(duration_s), endpoint=False)


def _sine(freq: float, duration_s: float) -> np.ndarray:
    """Pure sine wave at *freq* Hz for *duration_s* seconds."""
    return np.sin(2 * np.pi * freq * _time_axis(duration_s))


def _square(freq: float, duration_s: float) -> np.ndarray:
    return np.sign(_sine(freq, duration_s))


def _ramp_decay(
    length: int, peak: float, attack: int, floor: float = 0.001
) -> np.ndarray:
    """Linear attack to *peak*, then exponential decay to *floor*."""
    env = np.empty(length, dtype=np.float64)
    a = min(attack, length)
    env[:a] = np.linspace(0.0, peak, a, endpoint=False)
    if length > a:
        env[a:] = np.geomspace(peak, floor * peak, length - a)
    return env


def _mix_at(track: np.ndarray, clip: np.ndarray, offset_s: float) -> None:
    """Add *clip* into *track* starting at *offset_s*; clipped at the end."""
    start = _samples(offset_s)
    end = min(len(track), start + len(clip))
    if end > start:
        track[start:end] += clip[: end - start]


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Convert a float64 numpy array (-1..1) to 16-bit PCM WAV bytes."""
    samples = np.clip(samples, -1.0, 1.0)
    int_samples = (samples * 32767).astype(np.int16)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(int_samples.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  CUE GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_chime() -> bytes:
    """Work end: C5/E5/G5 entering 100 ms apart, all fading by 1.5 s."""
    total = 1.5
    track = np.zeros(_samples(total))
    for i, freq in enumerate(C_MAJOR):
        offset = i * 0.1
        length = total - offset
        tone = _sine(freq, length)
        tone *= _ramp_decay(len(tone), 0.3, attack=_samples(0.05))
        _mix_at(track, tone, offset)
    return _to_wav_bytes(track)


def _generate_alert() -> bytes:
    """Break end: two 200 ms A5 square beeps, 300 ms apart."""
    track = np.zeros(_samples(0.6))
    for i in range(2):
        beep = _square(880.0, 0.2)
        beep *= _ramp_decay(len(beep), 0.2, attack=_samples(0.02))
        _mix_at(track, beep, i * 0.3)
    return _to_wav_bytes(track)


def _generate_fanfare() -> bytes:
    """All sets done: C5→E5→G5→C6 arpeggio, then the full chord rings."""
    step = 0.15
    chord_at = len(C_MAJOR_OCTAVE) * step
    track = np.zeros(_samples(chord_at + 1.5))
    for i, freq in enumerate(C_MAJOR_OCTAVE):
        note = _sine(freq, 0.8)
        note *= _ramp_decay(len(note), 0.4, attack=_samples(0.05))
        _mix_at(track, note, i * step)
    for freq in C_MAJOR_OCTAVE:
        held = _sine(freq, 1.5)
        held *= _ramp_decay(len(held), 0.25, attack=1)
        _mix_at(track, held, chord_at)
    # four stacked voices can exceed full scale
    peak = np.max(np.abs(track))
    if peak > 1.0:
        track /= peak
    return _to_wav_bytes(track)


_GENERATORS: dict[str, Callable[[], bytes]] = {
    WORK_END: _generate_chime,
    BREAK_END: _generate_alert,
    COMPLETE: _generate_fanfare,
}


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Manages cue synthesis, caching, and playback.

    Usage::

        mgr = SoundManager(parent=self)
        mgr.set_volume(50)
        mgr.play(cue_for_session_end(SessionType.WORK))
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Optional[Path] = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 0.5  # 0.0–1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}

        self._ensure_wav_files()
        self._load_effects()

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play(self, name: str) -> None:
        """Play a cue by name.  No-op if disabled or name unknown."""
        if not self._enabled:
            return
        self._play_effect(name)

    def play_test(self) -> None:
        """Preview the chime regardless of the enabled flag."""
        self._play_effect(WORK_END)

    @property
    def volume(self) -> int:
        """Current volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ── internal ──────────────────────────────────────────────────────

    def _play_effect(self, name: str) -> None:
        effect = self._effects.get(name)
        if effect is None:
            logger.debug("No sound loaded for %r", name)
            return
        effect.play()

    def _ensure_wav_files(self) -> None:
        """Generate any missing WAV files to the cache directory."""
        try:
            self._sounds_dir.mkdir(parents=True, exist_ok=True)
            for name, gen_fn in _GENERATORS.items():
                path = self._sounds_dir / f"{name}.wav"
                if not path.exists():
                    path.write_bytes(gen_fn())
        except OSError as exc:
            logger.warning("Sound cache unavailable at %s: %s", self._sounds_dir, exc)

    def _load_effects(self) -> None:
        """Create QSoundEffect instances from cached WAV files."""
        for name in SOUND_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[name] = effect
