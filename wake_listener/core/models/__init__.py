# wake_listener/core/models/__init__.py

"""Value types shared across the detection pipeline."""

from .classification import LabelSet, ClassificationResult, ThresholdConfig, Decision
from .verdict import Verdict
from .listening_state import ListeningState

__all__ = [
    'LabelSet',
    'ClassificationResult',
    'ThresholdConfig',
    'Decision',
    'Verdict',
    'ListeningState'
]
