"""Microphone sample source using sounddevice"""

from typing import Optional

import numpy as np
import sounddevice as sd
import structlog

from wake_listener.core.exceptions import CaptureError, CaptureInitError
from wake_listener.core.ports.i_sample_source import ISampleSource

logger = structlog.get_logger()


class SoundDeviceSource(ISampleSource):
    """Handles live mono int16 input from a microphone"""

    def __init__(self, device: Optional[int] = None, gain: float = 1.0,
                 latency: str = 'low'):
        self.device = device
        self.gain = gain  # Audio gain multiplier
        self.latency = latency
        self.stream: Optional[sd.InputStream] = None
        self.overflow_count = 0

        logger.info(
            "sounddevice_source_initialized",
            device=device if device is not None else "default",
            gain=gain
        )

    def open(self, sample_rate: int, channels: int = 1, bit_depth: int = 16) -> None:
        """Open and start the input stream"""
        if channels != 1 or bit_depth != 16:
            raise CaptureInitError(
                f"only mono 16-bit capture is supported, got channels={channels}, bit_depth={bit_depth}"
            )
        if self.stream is not None:
            logger.debug("sounddevice_source_already_open")
            return

        try:
            stream = sd.InputStream(
                device=self.device,
                channels=channels,
                samplerate=sample_rate,
                dtype='int16',
                latency=self.latency
            )
            stream.start()
        except Exception as e:
            logger.error("failed_to_start_stream", error=str(e))
            raise CaptureInitError(f"Failed to open audio input: {e}") from e

        self.stream = stream
        logger.info("audio_stream_started", sample_rate=sample_rate)

    def read(self, frames: int) -> np.ndarray:
        """Read one chunk from the audio stream (blocking)"""
        if self.stream is None:
            raise CaptureError("audio stream is not open")

        try:
            audio_data, overflowed = self.stream.read(frames)
        except Exception as e:
            logger.error("read_chunk_error", error=str(e))
            raise CaptureError(f"Failed to read audio: {e}") from e

        # Hardware buffer dropped samples while we were classifying
        if overflowed:
            self.overflow_count += 1
            logger.warning("audio_buffer_overflow", total=self.overflow_count)

        audio_data = audio_data.flatten()

        if self.gain != 1.0:
            audio_data = np.clip(audio_data * self.gain, -32768, 32767).astype(np.int16)

        return audio_data

    def close(self) -> None:
        """Stop and close the audio stream"""
        stream, self.stream = self.stream, None
        if stream is None:
            return

        try:
            stream.stop()
            stream.close()
            logger.info("audio_stream_stopped")
        except Exception as e:
            logger.error("stop_stream_error", error=str(e))

    @property
    def is_open(self) -> bool:
        return self.stream is not None
