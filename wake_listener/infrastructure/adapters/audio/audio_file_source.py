"""Sample source backed by an audio file"""

from pathlib import Path
from typing import Optional

import librosa
import numpy as np
import structlog

from wake_listener.core.exceptions import CaptureError, CaptureInitError
from wake_listener.core.pipeline import denormalize
from wake_listener.core.ports.i_sample_source import ISampleSource

logger = structlog.get_logger()


class AudioFileSource(ISampleSource):
    """
    Replays an audio file as if it were a live mono int16 stream.

    The file is decoded and resampled to the requested rate on open();
    read() then hands out consecutive chunks until the file is exhausted.
    """

    def __init__(self, path: str, duration: Optional[float] = None):
        self.path = Path(path)
        self.duration = duration
        self._samples: Optional[np.ndarray] = None
        self._position = 0

    def open(self, sample_rate: int, channels: int = 1, bit_depth: int = 16) -> None:
        if channels != 1 or bit_depth != 16:
            raise CaptureInitError(
                f"only mono 16-bit capture is supported, got channels={channels}, bit_depth={bit_depth}"
            )
        if not self.path.exists():
            raise CaptureInitError(f"Audio file not found: {self.path}")

        try:
            audio, _ = librosa.load(str(self.path), sr=sample_rate, mono=True, duration=self.duration)
        except Exception as e:
            logger.error("audio_file_load_failed", path=str(self.path), error=str(e))
            raise CaptureInitError(f"Failed to decode {self.path}: {e}") from e

        # librosa decodes to float; hand out PCM like a microphone would
        self._samples = denormalize(audio)
        self._position = 0

        logger.info(
            "audio_file_opened",
            path=str(self.path),
            samples=len(self._samples),
            seconds=round(len(self._samples) / sample_rate, 2)
        )

    def read(self, frames: int) -> np.ndarray:
        if self._samples is None:
            raise CaptureError("audio file is not open")

        chunk = self._samples[self._position:self._position + frames]
        self._position += len(chunk)
        return chunk

    def close(self) -> None:
        if self._samples is not None:
            logger.debug("audio_file_closed", path=str(self.path), position=self._position)
        self._samples = None
        self._position = 0

    @property
    def is_open(self) -> bool:
        return self._samples is not None
