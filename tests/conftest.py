"""Shared test doubles: sample source, model runner"""

import threading
import time

import numpy as np
import pytest

from wake_listener.core.exceptions import CaptureError, CaptureInitError
from wake_listener.core.models import LabelSet, ThresholdConfig
from wake_listener.core.ports.i_model_runner import IModelRunner
from wake_listener.core.ports.i_sample_source import ISampleSource
from wake_listener.application.services import DetectionPipeline
from wake_listener.infrastructure.adapters.classifiers import DirectClassifier
from wake_listener.infrastructure.adapters.features import DirectFeatures

# int16 value used to mark "wake phrase" samples; normalizes to exactly 0.5
PATTERN_PCM = 16384
PATTERN_VALUE = PATTERN_PCM / 32768.0


class StubSource(ISampleSource):
    """
    Replays a fixed int16 stream.

    Position survives close/open, like a live microphone that kept running.
    """

    def __init__(self, samples=(), endless=False, fail_open_on=(), fail_read_after=None):
        """
        Args:
            samples: int16 samples to hand out
            endless: After the samples run out, keep returning silence
            fail_open_on: 1-based open() calls that raise CaptureInitError
            fail_read_after: Raise CaptureError after this many reads
        """
        self.samples = np.asarray(samples, dtype=np.int16)
        self.endless = endless
        self.fail_open_on = set(fail_open_on)
        self.fail_read_after = fail_read_after

        self.position = 0
        self.open_count = 0
        self.close_count = 0
        self.read_count = 0
        self.opened_with = None
        self._open = False
        self._lock = threading.Lock()

    def open(self, sample_rate, channels=1, bit_depth=16):
        self.open_count += 1
        if self.open_count in self.fail_open_on:
            raise CaptureInitError("microphone busy")
        self.opened_with = (sample_rate, channels, bit_depth)
        self._open = True

    def read(self, frames):
        if not self._open:
            raise CaptureError("read on closed source")

        self.read_count += 1
        if self.fail_read_after is not None and self.read_count > self.fail_read_after:
            raise CaptureError("device unplugged")

        with self._lock:
            chunk = self.samples[self.position:self.position + frames]
            self.position += len(chunk)

        if len(chunk) == 0 and self.endless:
            time.sleep(0.001)
            return np.zeros(frames, dtype=np.int16)
        return chunk

    def close(self):
        if self._open:
            self.close_count += 1
        self._open = False

    @property
    def is_open(self):
        return self._open


class StubRunner(IModelRunner):
    """Model runner returning scores computed by a plain function"""

    def __init__(self, input_shape, scores_fn, output_size=None, delay=0.0):
        self._input_shape = tuple(input_shape)
        self._output_size = output_size
        self.scores_fn = scores_fn
        self.delay = delay
        self.calls = 0

    @property
    def input_shape(self):
        return self._input_shape

    @property
    def output_size(self):
        return self._output_size

    def run(self, tensor):
        self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        return np.asarray(self.scores_fn(tensor), dtype=np.float32)


def pattern_scores(tensor):
    """[background, target]: 0.97 for target when pattern samples are present"""
    if np.any(tensor == np.float32(PATTERN_VALUE)):
        return [0.03, 0.97]
    return [1.0, 0.0]


def make_pipeline(window_size, scores_fn=pattern_scores, labels=("background", "target"),
                  threshold=0.95, target_index=1, latency_budget=None):
    runner = StubRunner((1, window_size), scores_fn, output_size=len(labels))
    classifier = DirectClassifier(runner, LabelSet(labels))
    extractor = DirectFeatures(window_size, classifier.input_shape)
    return DetectionPipeline(
        extractor,
        classifier,
        ThresholdConfig(threshold=threshold, target_index=target_index),
        latency_budget=latency_budget
    )


@pytest.fixture
def labels():
    return LabelSet(["background", "target"])


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
