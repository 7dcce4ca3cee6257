"""Tests for configuration loading and validation"""
from pathlib import Path

import pytest
import yaml

from wake_listener.core.config.settings import AudioConfig, load_config, parse_config
from wake_listener.core.exceptions import ConfigurationError

DEFAULT_CONFIG = Path(__file__).resolve().parent.parent / "config" / "wake_listener.yaml"


def minimal(**overrides):
    data = {
        'audio': {'sample_rate': 16000, 'window_duration': 0.5},
        'features': {'kind': 'direct'},
        'model': {'kind': 'direct', 'path': 'model.onnx', 'labels': ['background', 'target']},
        'detection': {'threshold': 0.9, 'target_index': 1},
    }
    for section, values in overrides.items():
        data[section] = {**data.get(section, {}), **values}
    return data


class TestDefaultConfig:

    def test_shipped_config_is_valid(self):
        config = load_config(str(DEFAULT_CONFIG))

        assert config.audio.window_size == 32000
        assert config.audio.effective_step_size == 16000
        assert config.audio.step_seconds == 1.0
        assert config.audio.prime_with_silence is True
        assert config.model.kind == 'spectrogram'
        assert config.model.labels == ['unknown', 'ssafy']
        assert config.detection.threshold == 0.95
        assert config.detection.to_threshold_config().target_index == 1


class TestAudioConfig:

    def test_step_ratio(self):
        audio = AudioConfig(sample_rate=16000, window_duration=1.0, step_ratio=0.25)
        assert audio.window_size == 16000
        assert audio.effective_step_size == 4000

    def test_explicit_step_overrides_ratio(self):
        config = parse_config(minimal(audio={'step_size': 1000}))
        assert config.audio.effective_step_size == 1000

    @pytest.mark.parametrize("audio", [
        {'step_size': 9000},
        {'step_size': 0},
        {'step_ratio': 1.5},
        {'channels': 2},
        {'sample_rate': 12345},
        {'chunk_size': 0},
        {'window_duration': 0},
    ])
    def test_invalid_audio(self, audio):
        with pytest.raises(ConfigurationError):
            parse_config(minimal(audio=audio))


class TestParseConfig:

    def test_minimal(self):
        config = parse_config(minimal())
        assert config.audio.window_size == 8000
        assert config.model.activation is None

    def test_model_path_required(self):
        with pytest.raises(ConfigurationError):
            parse_config({})

    def test_openwakeword_needs_no_path(self):
        config = parse_config(minimal(model={'kind': 'openwakeword', 'path': None, 'labels': [],
                                             'wakeword_models': ['alexa']},
                                      detection={'target_index': None}))
        assert config.model.wakeword_models == ['alexa']

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError):
            parse_config(minimal(audio={'sample_rat': 16000}))

    def test_section_must_be_mapping(self):
        data = minimal()
        data['audio'] = [16000]
        with pytest.raises(ConfigurationError):
            parse_config(data)

    @pytest.mark.parametrize("overrides", [
        {'model': {'kind': 'spectrogram'}},
        {'features': {'kind': 'spectrogram'}},
        {'features': {'kind': 'spectrogram', 'frame_length': 16000}, 'model': {'kind': 'spectrogram'}},
        {'features': {'hop_length': 0}},
        {'features': {'output_shape': [10]}},
        {'model': {'labels': ['a', 'a']}},
        {'model': {'activation': 'relu'}},
        {'detection': {'target_index': 2}},
        {'detection': {'threshold': 0}},
    ])
    def test_invalid(self, overrides):
        with pytest.raises(ConfigurationError):
            parse_config(minimal(**overrides))


class TestLoadConfig:

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_broken_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("audio: [unclosed\n", encoding='utf-8')
        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_round_trip_through_yaml(self, tmp_path):
        path = tmp_path / "wake.yaml"
        path.write_text(yaml.safe_dump(minimal(detection={'threshold': 0.8})), encoding='utf-8')

        config = load_config(str(path))
        assert config.detection.threshold == 0.8
        assert config.model.path == 'model.onnx'
