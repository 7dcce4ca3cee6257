# wake_listener/core/models/classification.py

"""Classification value types: labels, scores, threshold policy."""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Sequence

import numpy as np

from wake_listener.core.exceptions import ConfigurationError, InferenceError


class LabelSet:
    """
    Ordered, fixed set of labels indexing a classifier's score vector.

    Order must match the label order the model was trained with.
    """

    def __init__(self, labels: Iterable[str]):
        self._labels = tuple(labels)

        if not self._labels:
            raise ConfigurationError("label set must not be empty")
        if any(not isinstance(label, str) or not label for label in self._labels):
            raise ConfigurationError(f"labels must be non-empty strings, got {self._labels}")
        if len(set(self._labels)) != len(self._labels):
            raise ConfigurationError(f"labels must be unique, got {self._labels}")

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)

    def __getitem__(self, index: int) -> str:
        return self._labels[index]

    def __eq__(self, other) -> bool:
        if isinstance(other, LabelSet):
            return self._labels == other._labels
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._labels)

    def __repr__(self) -> str:
        return f"LabelSet({list(self._labels)!r})"

    def index(self, label: str) -> int:
        return self._labels.index(label)


class ClassificationResult:
    """Score vector aligned 1:1 with a LabelSet."""

    def __init__(self, scores: Sequence[float], labels: LabelSet):
        scores = np.array(scores, dtype=np.float64).reshape(-1)

        if scores.shape[0] != len(labels):
            raise InferenceError(
                f"model returned {scores.shape[0]} scores for {len(labels)} labels"
            )
        if not np.all(np.isfinite(scores)):
            raise InferenceError("model returned non-finite scores")

        scores.setflags(write=False)
        self.scores = scores
        self.labels = labels

    def __len__(self) -> int:
        return len(self.labels)

    def score_of(self, label: str) -> float:
        return float(self.scores[self.labels.index(label)])

    def as_dict(self) -> dict:
        return {label: float(score) for label, score in zip(self.labels, self.scores)}


@dataclass(frozen=True)
class ThresholdConfig:
    """
    Threshold policy.

    With target_index set, the score at that index is compared (single-keyword
    detectors). Without it, the best-scoring label wins (multi-class detectors).
    """
    threshold: float = 0.95
    target_index: Optional[int] = None

    def validate(self, labels: Optional[LabelSet] = None) -> None:
        if not isinstance(self.threshold, (int, float)) or isinstance(self.threshold, bool):
            raise ConfigurationError(f"threshold must be a number, got {self.threshold!r}")
        if not 0.0 < self.threshold <= 1.0:
            raise ConfigurationError(f"threshold must be in (0, 1], got {self.threshold}")

        if self.target_index is None:
            return
        if not isinstance(self.target_index, int) or isinstance(self.target_index, bool):
            raise ConfigurationError(f"target_index must be an integer, got {self.target_index!r}")
        if self.target_index < 0:
            raise ConfigurationError(f"target_index must be >= 0, got {self.target_index}")
        if labels is not None and self.target_index >= len(labels):
            raise ConfigurationError(
                f"target_index {self.target_index} out of range for {len(labels)} labels"
            )


@dataclass(frozen=True)
class Decision:
    """Outcome of applying a ThresholdConfig to a ClassificationResult"""
    label: str
    score: float
    index: int
    triggered: bool
