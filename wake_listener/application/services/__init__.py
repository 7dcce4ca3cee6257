# wake_listener/application/services/__init__.py

from .detection_pipeline import DetectionPipeline
from .listening_controller import ListeningController, ControlSignal
from .one_shot_classifier import OneShotClassifier

__all__ = ['DetectionPipeline', 'ListeningController', 'ControlSignal', 'OneShotClassifier']
