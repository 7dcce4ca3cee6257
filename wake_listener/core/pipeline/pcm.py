# wake_listener/core/pipeline/pcm.py

"""16-bit PCM <-> float conversion."""

import numpy as np

PCM_SCALE = 32768.0


def normalize(samples) -> np.ndarray:
    """
    Convert signed 16-bit samples to float32 in [-1.0, 1.0).

    Must be applied exactly once, where samples enter the pipeline.
    """
    samples = np.asarray(samples)
    if samples.dtype.kind == 'f':
        raise TypeError("normalize() expects integer PCM samples, got floating point input")
    return (samples.astype(np.float32) / PCM_SCALE).reshape(-1)


def denormalize(samples) -> np.ndarray:
    """Inverse of normalize(): float samples back to int16 (rounded, clipped)."""
    scaled = np.rint(np.asarray(samples, dtype=np.float64) * PCM_SCALE)
    return np.clip(scaled, -32768, 32767).astype(np.int16).reshape(-1)
