# wake_listener/core/pipeline/__init__.py

"""Pure signal-path building blocks: PCM scaling, windowing, decisions."""

from .pcm import normalize, denormalize, PCM_SCALE
from .sliding_window import SlidingWindowBuffer
from .decision_engine import decide

__all__ = [
    'normalize',
    'denormalize',
    'PCM_SCALE',
    'SlidingWindowBuffer',
    'decide'
]
