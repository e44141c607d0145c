"""Recording module.

Provides session recording and replay functionality.
"""

from surge_oracle.recording.events import RecordingEvent, RecordingEventType
from surge_oracle.recording.recorder import SessionPlayer, SessionRecorder

__all__ = [
    "RecordingEvent",
    "RecordingEventType",
    "SessionPlayer",
    "SessionRecorder",
]
