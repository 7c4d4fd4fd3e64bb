"""Audio cues."""

from .sounds import SoundManager, SOUND_NAMES, cue_for_session_end

__all__ = ["SoundManager", "SOUND_NAMES", "cue_for_session_end"]
