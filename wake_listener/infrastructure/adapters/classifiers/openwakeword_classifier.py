"""Classifier backed by pretrained OpenWakeWord models"""

from typing import List, Optional, Tuple

import numpy as np
import structlog
import openwakeword
from openwakeword.model import Model

from wake_listener.core.exceptions import ConfigurationError, InvalidInputError, ModelLoadError
from wake_listener.core.models import ClassificationResult, LabelSet
from wake_listener.core.pipeline import denormalize
from wake_listener.core.ports.i_classifier import IClassifier

logger = structlog.get_logger()

# OpenWakeWord consumes 80 ms frames at 16 kHz
FRAME_SAMPLES = 1280


class OpenWakeWordClassifier(IClassifier):
    """
    Scores a whole analysis window with OpenWakeWord.

    The window is fed frame by frame; a label's score is its best frame
    score. Model state is reset before every window, so windows stay
    independent of each other.
    """

    def __init__(self, window_size: int, keywords: Optional[List[str]] = None,
                 labels: Optional[LabelSet] = None, download: bool = True):
        """
        Args:
            window_size: Samples per analysis window
            keywords: Wake word model names (e.g. ["alexa", "hey_jarvis"])
            labels: Expected label order (default: as loaded)
            download: Fetch the pretrained models if missing
        """
        if window_size < FRAME_SAMPLES:
            raise ConfigurationError(
                f"window of {window_size} samples is shorter than one OpenWakeWord frame"
            )
        self.window_size = window_size

        if download:
            try:
                openwakeword.utils.download_models(model_names=keywords or [])
                logger.info("wake_word_models_downloaded")
            except Exception as e:
                logger.warning("model_download_warning", error=str(e))

        try:
            if keywords:
                logger.info("loading_specific_models", keywords=keywords)
                self.model = Model(wakeword_models=keywords)
            else:
                logger.info("loading_all_models")
                self.model = Model()
        except Exception as e:
            logger.error("openwakeword_load_failed", error=str(e))
            raise ModelLoadError(f"Failed to load OpenWakeWord models: {e}") from e

        loaded = LabelSet(self.model.models.keys())
        if labels is not None and set(labels) != set(loaded):
            raise ConfigurationError(
                f"configured labels {list(labels)} do not match loaded models {list(loaded)}"
            )
        self._labels = labels or loaded

        logger.info(
            "openwakeword_initialized",
            keywords=keywords if keywords else "all",
            loaded_models=list(loaded)
        )

    @property
    def labels(self) -> LabelSet:
        return self._labels

    @property
    def input_shape(self) -> Tuple[int, ...]:
        return (self.window_size,)

    def classify(self, tensor: np.ndarray) -> ClassificationResult:
        tensor = np.asarray(tensor)
        if tensor.shape != self.input_shape:
            raise InvalidInputError(
                f"tensor shape {tensor.shape} does not match model input {self.input_shape}"
            )

        # OpenWakeWord expects int16 audio
        pcm = denormalize(tensor)
        best = dict.fromkeys(self._labels, 0.0)

        self.model.reset()
        usable = len(pcm) - len(pcm) % FRAME_SAMPLES
        for start in range(0, usable, FRAME_SAMPLES):
            predictions = self.model.predict(pcm[start:start + FRAME_SAMPLES])
            for label, score in predictions.items():
                if label in best:
                    best[label] = max(best[label], float(score))

        return ClassificationResult([best[label] for label in self._labels], self._labels)
