# wake_listener/core/pipeline/decision_engine.py

"""Threshold policy applied to a classification result."""

import numpy as np

from wake_listener.core.models import ClassificationResult, Decision, ThresholdConfig


def decide(result: ClassificationResult, cfg: ThresholdConfig) -> Decision:
    """
    Pick the score to compare and apply the threshold.

    Target-index mode compares that label's score. Otherwise the maximum
    score wins; on an exact tie the lowest index is chosen.
    Pure function, no side effects.
    """
    if cfg.target_index is not None:
        index = cfg.target_index
        if index >= len(result):
            raise IndexError(
                f"target_index {index} out of range for {len(result)} labels"
            )
    else:
        # np.argmax returns the first occurrence of the maximum
        index = int(np.argmax(result.scores))

    score = float(result.scores[index])

    return Decision(
        label=result.labels[index],
        score=score,
        index=index,
        triggered=score >= cfg.threshold
    )
