"""Tests for labels, scores, threshold policy and verdicts"""
import numpy as np
import pytest

from wake_listener.core.exceptions import ConfigurationError, InferenceError, InvalidInputError
from wake_listener.core.models import (
    ClassificationResult,
    Decision,
    LabelSet,
    ListeningState,
    ThresholdConfig,
    Verdict,
)


class TestLabelSet:

    def test_keeps_order(self):
        labels = LabelSet(["unknown", "ssafy"])
        assert list(labels) == ["unknown", "ssafy"]
        assert labels[1] == "ssafy"
        assert labels.index("unknown") == 0
        assert len(labels) == 2

    @pytest.mark.parametrize("bad", [[], ["a", "a"], ["a", ""], ["a", 3]])
    def test_rejects_invalid(self, bad):
        with pytest.raises(ConfigurationError):
            LabelSet(bad)

    def test_equality(self):
        assert LabelSet(["a", "b"]) == LabelSet(("a", "b"))
        assert LabelSet(["a", "b"]) != LabelSet(["b", "a"])


class TestClassificationResult:

    def test_length_must_match_labels(self, labels):
        with pytest.raises(InferenceError):
            ClassificationResult([0.1, 0.2, 0.7], labels)

    def test_rejects_non_finite(self, labels):
        with pytest.raises(InferenceError):
            ClassificationResult([np.nan, 0.5], labels)

    def test_scores_are_read_only_copy(self, labels):
        source = np.array([0.25, 0.75], dtype=np.float32)
        result = ClassificationResult(source, labels)

        assert result.scores.dtype == np.float64
        assert source.flags.writeable
        with pytest.raises(ValueError):
            result.scores[0] = 1.0

    def test_lookup(self, labels):
        result = ClassificationResult([0.25, 0.75], labels)
        assert result.score_of("target") == 0.75
        assert result.as_dict() == {"background": 0.25, "target": 0.75}

    def test_accepts_model_output_shape(self, labels):
        result = ClassificationResult(np.array([[0.4, 0.6]]), labels)
        assert result.scores.shape == (2,)


class TestThresholdConfig:

    def test_defaults(self):
        cfg = ThresholdConfig()
        assert cfg.threshold == 0.95
        assert cfg.target_index is None
        cfg.validate()

    @pytest.mark.parametrize("threshold", [0.0, -0.1, 1.01, "high", True])
    def test_threshold_range(self, threshold):
        with pytest.raises(ConfigurationError):
            ThresholdConfig(threshold=threshold).validate()

    def test_threshold_of_one_is_allowed(self):
        ThresholdConfig(threshold=1.0).validate()

    def test_target_index_checked_against_labels(self, labels):
        ThresholdConfig(target_index=1).validate(labels)
        with pytest.raises(ConfigurationError):
            ThresholdConfig(target_index=2).validate(labels)
        with pytest.raises(ConfigurationError):
            ThresholdConfig(target_index=-1).validate(labels)


class TestVerdict:

    def test_from_decision(self):
        decision = Decision(label="target", score=0.97, index=1, triggered=True)
        verdict = Verdict.from_decision(decision, window_index=4, timestamp=12.5)

        assert verdict.triggered
        assert not verdict.is_error
        assert verdict.to_dict() == {
            'label': "target",
            'score': 0.97,
            'triggered': True,
            'timestamp': 12.5,
            'window_index': 4,
            'error': None,
            'error_type': None
        }

    def test_error_verdict_never_triggers(self):
        verdict = Verdict.from_error(InvalidInputError("bad shape"), window_index=2)

        assert verdict.is_error
        assert verdict.triggered is False
        assert verdict.score is None
        assert verdict.error == "bad shape"
        assert verdict.error_type == "InvalidInputError"

    def test_error_without_message_uses_type(self):
        assert Verdict.from_error(RuntimeError()).error == "RuntimeError"


def test_active_states():
    assert ListeningState.CAPTURING.is_active
    assert ListeningState.PAUSED_FOR_ACK.is_active
    assert not ListeningState.IDLE.is_active
    assert not ListeningState.STOPPED.is_active
