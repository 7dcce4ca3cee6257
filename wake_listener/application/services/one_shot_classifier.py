# wake_listener/application/services/one_shot_classifier.py

"""Classify a single recorded clip or audio file."""

import numpy as np
import structlog

from wake_listener.core.models import Verdict
from wake_listener.core.pipeline import normalize
from wake_listener.core.ports.i_sample_source import ISampleSource
from wake_listener.infrastructure.adapters.audio.audio_file_source import AudioFileSource
from .detection_pipeline import DetectionPipeline

logger = structlog.get_logger()


class OneShotClassifier:
    """
    Records exactly one window's worth of samples and classifies it.

    No sliding window and no state machine: open, read, close, classify.
    Streams that end early are zero-padded to the window length.
    """

    def __init__(self, pipeline: DetectionPipeline, sample_rate: int, window_size: int,
                 chunk_size: int = 1024):
        self.pipeline = pipeline
        self.sample_rate = sample_rate
        self.window_size = window_size
        self.chunk_size = chunk_size

    def record(self, source: ISampleSource) -> np.ndarray:
        """
        Read one window of int16 samples from `source`.

        Raises:
            CaptureInitError: If the source cannot be opened
        """
        source.open(self.sample_rate)
        chunks = []
        collected = 0

        try:
            while collected < self.window_size:
                chunk = source.read(min(self.chunk_size, self.window_size - collected))
                if len(chunk) == 0:
                    break
                chunks.append(chunk)
                collected += len(chunk)
        finally:
            source.close()

        pcm = np.concatenate(chunks) if chunks else np.zeros(0, dtype=np.int16)
        if collected < self.window_size:
            logger.warning("recording_short_padded", samples=collected, window_size=self.window_size)
            pcm = np.pad(pcm, (0, self.window_size - collected))

        logger.info("recording_complete", samples=collected)
        return pcm.astype(np.int16, copy=False)

    def classify_recording(self, source: ISampleSource) -> Verdict:
        """Record one window from `source` and classify it"""
        window = normalize(self.record(source))
        verdict = self.pipeline.process(window)

        logger.info(
            "one_shot_classified",
            label=verdict.label,
            score=verdict.score,
            triggered=verdict.triggered,
            error=verdict.error
        )
        return verdict

    def classify_file(self, path: str) -> Verdict:
        """Classify the first window of an audio file"""
        return self.classify_recording(
            AudioFileSource(path, duration=self.window_size / self.sample_rate)
        )
