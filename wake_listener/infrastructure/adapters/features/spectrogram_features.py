"""Short-time spectrogram features"""

from typing import Optional, Sequence, Tuple

import librosa
import numpy as np
import structlog

from wake_listener.core.exceptions import ConfigurationError, ExtractionError, InvalidInputError
from wake_listener.core.ports.i_feature_extractor import IFeatureExtractor
from .direct_features import resolve_shape

logger = structlog.get_logger()


# Names accepted in config, mapped to scipy window names
WINDOW_FUNCTIONS = {
    'hann': 'hann',
    'hamming': 'hamming',
    'rectangular': 'boxcar',
}


def analysis_window(name: str, length: int) -> np.ndarray:
    """Periodic analysis window (the variant used for spectral analysis)"""
    if name not in WINDOW_FUNCTIONS:
        raise ConfigurationError(f"unknown analysis window '{name}'")
    return librosa.filters.get_window(WINDOW_FUNCTIONS[name], length, fftbins=True).astype(np.float32)


def fit_to_shape(spec: np.ndarray, shape: Tuple[int, int]) -> np.ndarray:
    """Crop or zero-pad a [time, freq] array to `shape`"""
    spec = spec[:shape[0], :shape[1]]
    pad_time = shape[0] - spec.shape[0]
    pad_freq = shape[1] - spec.shape[1]
    if pad_time or pad_freq:
        spec = np.pad(spec, ((0, pad_time), (0, pad_freq)))
    return spec


class SpectrogramFeatures(IFeatureExtractor):
    """
    Magnitude spectrogram of one analysis window.

    The window is cut into overlapping sub-frames, each frame is multiplied by
    the analysis window and transformed with a real FFT. Magnitudes are
    optionally mel-projected, scaled (log1p / dB) and min-max normalized, then
    stacked into a [time, freq] array and fitted to the model input shape.

    Deterministic: same samples in, same tensor out.
    """

    def __init__(
            self,
            sample_rate: int,
            window_size: int,
            frame_length: int = 512,
            hop_length: int = 256,
            window_fn: str = 'hann',
            scale: str = 'log1p',
            n_mels: Optional[int] = None,
            normalize: bool = False,
            output_shape: Optional[Sequence[int]] = None,
            input_shape: Optional[Sequence[int]] = None
    ):
        """
        Args:
            sample_rate: Sample rate (Hz)
            window_size: Samples per analysis window
            frame_length: Sub-frame length (also the FFT size)
            hop_length: Samples between sub-frame starts
            window_fn: 'hann', 'hamming' or 'rectangular'
            scale: 'magnitude', 'log1p' or 'db'
            n_mels: Mel bands (None = linear frequency bins)
            normalize: Min-max normalize each spectrogram to [0, 1]
            output_shape: [time, freq] to crop/pad to (None = natural size)
            input_shape: Full model input shape (None = [1, time, freq])
        """
        if frame_length > window_size:
            raise ConfigurationError(
                f"frame_length {frame_length} is longer than the window ({window_size} samples)"
            )
        if not 0 < hop_length <= frame_length:
            raise ConfigurationError("hop_length must satisfy 0 < hop <= frame_length")
        if scale not in ('magnitude', 'log1p', 'db'):
            raise ConfigurationError(f"unknown spectrogram scale '{scale}'")

        self.sample_rate = sample_rate
        self.window_size = window_size
        self.frame_length = frame_length
        self.hop_length = hop_length
        self.scale = scale
        self.normalize = normalize

        self.window = analysis_window(window_fn, frame_length)
        self.n_frames = 1 + (window_size - frame_length) // hop_length
        n_bins = frame_length // 2 + 1

        # Mel filterbank is fixed per instance
        self.mel_basis = None
        if n_mels:
            self.mel_basis = librosa.filters.mel(
                sr=sample_rate, n_fft=frame_length, n_mels=n_mels
            ).astype(np.float32)
            n_bins = n_mels

        self.natural_shape = (self.n_frames, n_bins)
        if output_shape is None and input_shape is not None:
            output_shape = self._core_shape(input_shape)
        self.spectrogram_shape = tuple(output_shape) if output_shape else self.natural_shape

        size = self.spectrogram_shape[0] * self.spectrogram_shape[1]
        self._output_shape = resolve_shape(input_shape or (1,) + self.spectrogram_shape, size)

        logger.debug(
            "spectrogram_features_initialized",
            frames=self.n_frames,
            bins=n_bins,
            scale=scale,
            mel=bool(n_mels),
            output_shape=self._output_shape
        )

    @staticmethod
    def _core_shape(input_shape: Sequence[int]) -> Optional[Tuple[int, int]]:
        """[time, freq] part of a model input shape, if it can be told apart"""
        dims = [d for d in input_shape if d is not None and d > 1]
        if len(dims) == 2:
            return dims[0], dims[1]
        return None

    @property
    def output_shape(self) -> Tuple[int, ...]:
        return self._output_shape

    def extract(self, window: np.ndarray) -> np.ndarray:
        window = np.asarray(window, dtype=np.float32)
        if window.ndim != 1 or window.shape[0] != self.window_size:
            raise InvalidInputError(
                f"expected a window of {self.window_size} samples, got shape {window.shape}"
            )

        spec = self.spectrogram(window)
        spec = fit_to_shape(spec, self.spectrogram_shape)
        return spec.reshape(self._output_shape).astype(np.float32)

    def spectrogram(self, window: np.ndarray) -> np.ndarray:
        """[time, freq] spectrogram at natural size"""
        # [n_frames, frame_length]
        frames = librosa.util.frame(
            window, frame_length=self.frame_length, hop_length=self.hop_length, axis=0
        ) * self.window

        magnitude = np.abs(np.fft.rfft(frames, n=self.frame_length, axis=1))

        if self.mel_basis is not None:
            magnitude = magnitude @ self.mel_basis.T

        spec = self._scale(magnitude)

        if self.normalize:
            low, high = float(spec.min()), float(spec.max())
            if high - low < 1e-12:
                raise ExtractionError("flat spectrogram cannot be normalized (silent window?)")
            spec = (spec - low) / (high - low)

        if not np.all(np.isfinite(spec)):
            raise ExtractionError("spectrogram contains non-finite values")

        return spec

    def _scale(self, magnitude: np.ndarray) -> np.ndarray:
        if self.scale == 'magnitude':
            return magnitude
        if self.scale == 'log1p':
            return np.log1p(magnitude)

        # dB relative to the loudest bin; undefined for an all-zero window
        ref = float(magnitude.max())
        if ref <= 0.0:
            raise ExtractionError("dB scale is undefined for a silent window")
        return librosa.amplitude_to_db(magnitude, ref=ref, top_db=80.0)
