"""Classifier for models fed the raw waveform"""

from .base_classifier import BaseClassifier


class DirectClassifier(BaseClassifier):
    """
    Raw-waveform model (e.g. a 1-D CNN over the normalized window).

    Such models usually end in a sigmoid/softmax layer already, so scores are
    used as-is unless an activation is configured.
    """

    default_activation = 'none'
