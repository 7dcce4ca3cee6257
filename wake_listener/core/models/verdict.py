# wake_listener/core/models/verdict.py

"""Per-window verdict published to the presentation layer."""

import time
from dataclasses import dataclass, field
from typing import Optional

from .classification import Decision


@dataclass(frozen=True)
class Verdict:
    """
    One verdict per completed window.

    Error verdicts carry the error message instead of a score and never
    trigger.
    """
    label: Optional[str]
    score: Optional[float]
    triggered: bool
    window_index: int = 0
    timestamp: float = field(default_factory=time.time)
    error: Optional[str] = None
    error_type: Optional[str] = None

    @classmethod
    def from_decision(cls, decision: Decision, window_index: int = 0,
                      timestamp: Optional[float] = None) -> "Verdict":
        return cls(
            label=decision.label,
            score=decision.score,
            triggered=decision.triggered,
            window_index=window_index,
            timestamp=time.time() if timestamp is None else timestamp
        )

    @classmethod
    def from_error(cls, error: Exception, window_index: int = 0) -> "Verdict":
        return cls(
            label=None,
            score=None,
            triggered=False,
            window_index=window_index,
            error=str(error) or type(error).__name__,
            error_type=type(error).__name__
        )

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict:
        """Export as dict"""
        return {
            'label': self.label,
            'score': self.score,
            'triggered': self.triggered,
            'timestamp': self.timestamp,
            'window_index': self.window_index,
            'error': self.error,
            'error_type': self.error_type
        }
