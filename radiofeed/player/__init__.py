"""
Player — local playback of the live stream.

The controller owns the Idle/Loading/Playing/Errored state machine; the
handle renders audio.  The handle is an off-the-shelf player (mpv), driven
over its IPC socket rather than reimplemented.

  playback.py  — PlaybackController + MediaHandle interface
  mpv.py       — MpvStream, the mpv-backed handle
"""

from .mpv import MpvStream
from .playback import MediaHandle, PlaybackController, cache_busted

__all__ = ["MediaHandle", "MpvStream", "PlaybackController", "cache_busted"]
