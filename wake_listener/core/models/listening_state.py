# wake_listener/core/models/listening_state.py

"""Listening controller state model"""

from enum import Enum


class ListeningState(Enum):
    """Listening controller states"""
    IDLE = "idle"  # Constructed, never started
    CAPTURING = "capturing"  # Worker reads samples and classifies windows
    PAUSED_FOR_ACK = "paused_for_ack"  # Triggered, capture released
    STOPPED = "stopped"  # Session ended (see controller.fatal)

    @property
    def is_active(self) -> bool:
        """True while a session (and its worker) is alive"""
        return self in (ListeningState.CAPTURING, ListeningState.PAUSED_FOR_ACK)
