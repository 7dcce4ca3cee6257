"""Tests for threshold decisions"""
import numpy as np
import pytest

from wake_listener.core.models import ClassificationResult, LabelSet, ThresholdConfig
from wake_listener.core.pipeline import decide


def result(scores, labels=("unknown", "hey", "stop")):
    return ClassificationResult(scores, LabelSet(labels))


class TestDecide:

    def test_score_equal_to_threshold_triggers(self):
        decision = decide(result([0.1, 0.95, 0.2]), ThresholdConfig(threshold=0.95))
        assert decision.triggered is True
        assert decision.label == "hey"

    def test_score_just_below_threshold_does_not_trigger(self):
        below = np.nextafter(0.95, 0.0)
        decision = decide(result([0.1, below, 0.2]), ThresholdConfig(threshold=0.95))
        assert decision.triggered is False
        assert decision.score == below

    def test_max_mode_picks_best_label(self):
        decision = decide(result([0.2, 0.3, 0.99]), ThresholdConfig(threshold=0.9))
        assert decision.label == "stop"
        assert decision.index == 2
        assert decision.triggered

    def test_tie_picks_lowest_index(self):
        decision = decide(result([0.4, 0.6, 0.6]), ThresholdConfig(threshold=0.5))
        assert decision.index == 1
        assert decision.label == "hey"

    def test_target_index_ignores_other_labels(self):
        decision = decide(result([0.99, 0.1, 0.5]), ThresholdConfig(threshold=0.9, target_index=1))
        assert decision.label == "hey"
        assert decision.score == pytest.approx(0.1)
        assert decision.triggered is False

    def test_target_index_out_of_range(self):
        with pytest.raises(IndexError):
            decide(result([0.1, 0.2, 0.3]), ThresholdConfig(target_index=5))

    def test_decide_is_pure(self):
        res = result([0.1, 0.97, 0.2])
        cfg = ThresholdConfig(threshold=0.95)
        assert decide(res, cfg) == decide(res, cfg)
        np.testing.assert_array_equal(res.scores, [0.1, 0.97, 0.2])
