"""Classifier for models fed a spectrogram"""

from .base_classifier import BaseClassifier


class SpectrogramClassifier(BaseClassifier):
    """
    Spectrogram model (e.g. a ResNet over a [time, freq] image).

    These export raw logits, so softmax is applied by default to get a
    per-label probability vector.
    """

    default_activation = 'softmax'
