"""Tests for container wiring"""
import numpy as np
import pytest
import yaml

from conftest import PATTERN_PCM, StubRunner, StubSource, pattern_scores
from wake_listener.core.config.container import Container
from wake_listener.core.config.settings import parse_config
from wake_listener.core.exceptions import ConfigurationError, ModelLoadError
from wake_listener.core.models import ListeningState

CONFIG = {
    'audio': {'sample_rate': 16000, 'window_duration': 0.5, 'step_ratio': 0.5, 'chunk_size': 1000},
    'features': {'kind': 'direct'},
    'model': {'kind': 'direct', 'path': 'models/stub.onnx', 'labels': ['background', 'target']},
    'detection': {'threshold': 0.95, 'target_index': 1},
}


@pytest.fixture
def runner():
    return StubRunner((1, 8000), pattern_scores, output_size=2)


class TestContainer:

    def test_wires_controller(self, runner):
        verdicts = []
        container = Container(
            config=parse_config(CONFIG),
            sample_source=StubSource(np.zeros(8000, dtype=np.int16)),
            model_runner=runner
        )
        controller = container.listening_controller(on_verdict=verdicts.append)

        controller.start()

        assert controller.wait_for_state(ListeningState.STOPPED, 5.0)
        assert controller.join(5.0)
        assert controller.step_size == 4000
        assert len(verdicts) == 2
        assert not any(v.triggered for v in verdicts)

    def test_wires_one_shot(self, runner):
        container = Container(config=parse_config(CONFIG), sample_source=StubSource(), model_runner=runner)
        verdict = container.one_shot_classifier().classify_recording(
            StubSource(np.full(8000, PATTERN_PCM, dtype=np.int16))
        )
        assert verdict.triggered

    def test_model_loaded_once(self, runner):
        container = Container(config=parse_config(CONFIG), sample_source=StubSource(), model_runner=runner)

        assert container.model_runner is runner
        assert container.classifier.runner is runner
        # Latency probe only
        assert runner.calls == 3

    def test_label_count_mismatch(self):
        runner = StubRunner((1, 8000), pattern_scores, output_size=3)
        with pytest.raises(ConfigurationError):
            Container(config=parse_config(CONFIG), sample_source=StubSource(), model_runner=runner)

    def test_missing_model_file(self, tmp_path):
        config = parse_config({**CONFIG, 'model': {**CONFIG['model'], 'path': str(tmp_path / "gone.onnx")}})
        with pytest.raises(ModelLoadError):
            Container(config=config, sample_source=StubSource())

    def test_config_path_from_environment(self, tmp_path, monkeypatch, runner):
        path = tmp_path / "wake.yaml"
        path.write_text(yaml.safe_dump(CONFIG), encoding='utf-8')
        monkeypatch.setenv("WAKE_LISTENER_CONFIG", str(path))

        container = Container(sample_source=StubSource(), model_runner=runner)

        assert container.config.audio.window_size == 8000
