# wake_listener/infrastructure/adapters/classifiers/__init__.py

"""Classifier variants and model runners."""

from .base_classifier import BaseClassifier
from .direct_classifier import DirectClassifier
from .spectrogram_classifier import SpectrogramClassifier
from .onnx_model_runner import OnnxModelRunner

__all__ = [
    'BaseClassifier',
    'DirectClassifier',
    'SpectrogramClassifier',
    'OnnxModelRunner'
]
