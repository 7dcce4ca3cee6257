# wake_listener/infrastructure/adapters/features/__init__.py

"""Feature extractors: raw waveform and spectrogram."""

from .direct_features import DirectFeatures, resolve_shape
from .spectrogram_features import SpectrogramFeatures

__all__ = [
    'DirectFeatures',
    'SpectrogramFeatures',
    'resolve_shape'
]
