"""Shared classifier behaviour: shape checks, activation, result building"""

from typing import Optional, Sequence, Tuple

import numpy as np
import structlog

from wake_listener.core.exceptions import ConfigurationError, InferenceError, InvalidInputError
from wake_listener.core.models import ClassificationResult, LabelSet
from wake_listener.core.ports.i_classifier import IClassifier
from wake_listener.core.ports.i_model_runner import IModelRunner

logger = structlog.get_logger()


def sigmoid(x: np.ndarray) -> np.ndarray:
    return 1.0 / (1.0 + np.exp(-x))


def softmax(x: np.ndarray) -> np.ndarray:
    shifted = np.exp(x - np.max(x))
    return shifted / shifted.sum()


ACTIVATIONS = {
    'none': lambda x: x,
    'sigmoid': sigmoid,
    'softmax': softmax,
}


def shape_matches(shape: Sequence[int], expected: Sequence[int]) -> bool:
    """True if `shape` fits `expected`, where -1 in `expected` matches any size"""
    if len(shape) != len(expected):
        return False
    return all(e == -1 or s == e for s, e in zip(shape, expected))


class BaseClassifier(IClassifier):
    """
    Runs a model through an IModelRunner.

    The runner (and therefore the model) is created once and reused for
    every window; never build a classifier per window.
    """

    default_activation = 'none'

    def __init__(self, runner: IModelRunner, labels: LabelSet,
                 activation: Optional[str] = None):
        """
        Args:
            runner: Loaded model runner
            labels: Labels in model output order
            activation: Output activation ('none', 'sigmoid', 'softmax')
        """
        self.runner = runner
        self._labels = labels
        self.activation = activation or self.default_activation

        if self.activation not in ACTIVATIONS:
            raise ConfigurationError(f"unknown activation '{self.activation}'")

        output_size = runner.output_size
        if output_size is not None and output_size != len(labels):
            raise ConfigurationError(
                f"model produces {output_size} scores but {len(labels)} labels are configured"
            )

        logger.info(
            "classifier_initialized",
            classifier=type(self).__name__,
            labels=list(labels),
            input_shape=runner.input_shape,
            activation=self.activation
        )

    @property
    def labels(self) -> LabelSet:
        return self._labels

    @property
    def input_shape(self) -> Tuple[int, ...]:
        return self.runner.input_shape

    def classify(self, tensor: np.ndarray) -> ClassificationResult:
        tensor = np.asarray(tensor)

        if not shape_matches(tensor.shape, self.input_shape):
            raise InvalidInputError(
                f"tensor shape {tensor.shape} does not match model input {self.input_shape}"
            )
        if not np.all(np.isfinite(tensor)):
            raise InvalidInputError("tensor contains non-finite values")

        raw = np.asarray(self.runner.run(tensor), dtype=np.float64).reshape(-1)

        if not np.all(np.isfinite(raw)):
            raise InferenceError("model returned non-finite output")

        scores = np.clip(ACTIVATIONS[self.activation](raw), 0.0, 1.0)
        return ClassificationResult(scores, self._labels)
