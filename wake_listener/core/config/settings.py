"""Configuration management"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import structlog
import yaml

from wake_listener.core.exceptions import ConfigurationError
from wake_listener.core.models import LabelSet, ThresholdConfig

logger = structlog.get_logger()

FEATURE_KINDS = ('direct', 'spectrogram')
MODEL_KINDS = ('direct', 'spectrogram', 'openwakeword')
WINDOW_FUNCTIONS = ('hann', 'hamming', 'rectangular')
SPECTROGRAM_SCALES = ('magnitude', 'log1p', 'db')
ACTIVATIONS = ('none', 'sigmoid', 'softmax')


@dataclass
class AudioConfig:
    """Audio capture and windowing configuration"""
    sample_rate: int = 16000
    channels: int = 1
    window_duration: float = 2.0  # seconds per analysis window
    step_ratio: float = 0.5  # 0.5 = 50% overlap
    step_size: Optional[int] = None  # explicit override of step_ratio
    chunk_size: int = 1024  # samples per read
    prime_with_silence: bool = True  # first window after step_size samples
    device: Optional[int] = None
    gain: float = 1.0

    @property
    def window_size(self) -> int:
        """Délka okna ve vzorcích."""
        return int(round(self.sample_rate * self.window_duration))

    @property
    def effective_step_size(self) -> int:
        """Kolik nových vzorků dokončí další okno."""
        if self.step_size is not None:
            return self.step_size
        return int(self.window_size * self.step_ratio)

    @property
    def step_seconds(self) -> float:
        """Time available to process one window before the next one completes"""
        return self.effective_step_size / self.sample_rate

    def validate(self) -> None:
        if self.sample_rate not in [8000, 16000, 22050, 32000, 44100, 48000]:
            raise ConfigurationError(
                f"audio.sample_rate must be one of 8000/16000/22050/32000/44100/48000, got {self.sample_rate}"
            )
        if self.channels != 1:
            raise ConfigurationError(f"audio.channels must be 1 (mono), got {self.channels}")
        if self.window_duration <= 0:
            raise ConfigurationError("audio.window_duration must be > 0")
        if self.step_size is None and not 0.0 < self.step_ratio <= 1.0:
            raise ConfigurationError(f"audio.step_ratio must be in (0, 1], got {self.step_ratio}")
        if not 0 < self.effective_step_size <= self.window_size:
            raise ConfigurationError(
                f"step size must satisfy 0 < step <= window ({self.window_size}), "
                f"got {self.effective_step_size}"
            )
        if self.chunk_size < 1:
            raise ConfigurationError("audio.chunk_size must be >= 1")
        if self.gain <= 0:
            raise ConfigurationError("audio.gain must be > 0")


@dataclass
class FeatureConfig:
    """Feature extraction configuration"""
    kind: str = 'direct'
    frame_length: int = 512
    hop_length: int = 256
    window_fn: str = 'hann'
    scale: str = 'log1p'
    n_mels: Optional[int] = None
    normalize: bool = False
    output_shape: Optional[List[int]] = None  # [time, freq]; None = natural size

    def validate(self) -> None:
        if self.kind not in FEATURE_KINDS:
            raise ConfigurationError(f"features.kind must be one of {FEATURE_KINDS}, got '{self.kind}'")
        if self.frame_length < 2:
            raise ConfigurationError("features.frame_length must be >= 2")
        if not 0 < self.hop_length <= self.frame_length:
            raise ConfigurationError("features.hop_length must satisfy 0 < hop <= frame_length")
        if self.window_fn not in WINDOW_FUNCTIONS:
            raise ConfigurationError(f"features.window_fn must be one of {WINDOW_FUNCTIONS}")
        if self.scale not in SPECTROGRAM_SCALES:
            raise ConfigurationError(f"features.scale must be one of {SPECTROGRAM_SCALES}")
        if self.n_mels is not None and self.n_mels < 1:
            raise ConfigurationError("features.n_mels must be >= 1")
        if self.output_shape is not None:
            if len(self.output_shape) != 2 or any(d < 1 for d in self.output_shape):
                raise ConfigurationError("features.output_shape must be [time, freq] with positive sizes")


@dataclass
class ModelConfig:
    """Model artifact configuration"""
    kind: str = 'direct'
    path: Optional[str] = None
    labels: List[str] = field(default_factory=list)
    input_shape: Optional[List[int]] = None  # None = read from the model
    activation: Optional[str] = None  # None = classifier default
    wakeword_models: List[str] = field(default_factory=list)

    def validate(self) -> None:
        if self.kind not in MODEL_KINDS:
            raise ConfigurationError(f"model.kind must be one of {MODEL_KINDS}, got '{self.kind}'")
        if self.kind != 'openwakeword':
            if not self.path:
                raise ConfigurationError(f"model.path is required for '{self.kind}' models")
            LabelSet(self.labels)
        if self.activation is not None and self.activation not in ACTIVATIONS:
            raise ConfigurationError(f"model.activation must be one of {ACTIVATIONS}")


@dataclass
class DetectionConfig:
    """Trigger decision configuration"""
    threshold: float = 0.95
    target_index: Optional[int] = None
    enforce_latency_budget: bool = False

    def to_threshold_config(self) -> ThresholdConfig:
        return ThresholdConfig(threshold=self.threshold, target_index=self.target_index)

    def validate(self, labels: Optional[LabelSet] = None) -> None:
        self.to_threshold_config().validate(labels)


@dataclass
class Config:
    """Main configuration"""
    audio: AudioConfig = field(default_factory=AudioConfig)
    features: FeatureConfig = field(default_factory=FeatureConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)

    def validate(self) -> None:
        """Validuj celou konfiguraci."""
        self.audio.validate()
        self.features.validate()
        self.model.validate()

        labels = LabelSet(self.model.labels) if self.model.labels else None
        self.detection.validate(labels)

        if self.model.kind == 'spectrogram' and self.features.kind != 'spectrogram':
            raise ConfigurationError("spectrogram models need features.kind = spectrogram")
        if self.model.kind in ('direct', 'openwakeword') and self.features.kind != 'direct':
            raise ConfigurationError(f"'{self.model.kind}' models need features.kind = direct")
        if self.features.kind == 'spectrogram' and self.features.frame_length > self.audio.window_size:
            raise ConfigurationError("features.frame_length is longer than the analysis window")


def _section(data: dict, name: str, cls):
    values = data.get(name) or {}
    if not isinstance(values, dict):
        raise ConfigurationError(f"config section '{name}' must be a mapping")
    try:
        return cls(**values)
    except TypeError as e:
        raise ConfigurationError(f"invalid keys in config section '{name}': {e}") from e


def parse_config(data: dict) -> Config:
    """Build and validate a Config from a parsed YAML mapping"""
    if not isinstance(data, dict):
        raise ConfigurationError("config root must be a mapping")

    config = Config(
        audio=_section(data, 'audio', AudioConfig),
        features=_section(data, 'features', FeatureConfig),
        model=_section(data, 'model', ModelConfig),
        detection=_section(data, 'detection', DetectionConfig)
    )
    config.validate()
    return config


def load_config(config_path: str = "config/wake_listener.yaml") -> Config:
    """Load configuration from YAML file"""
    path = Path(config_path)

    if not path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse config {config_path}: {e}") from e

    config = parse_config(data)

    logger.info(
        "config_loaded",
        path=str(path),
        model_kind=config.model.kind,
        window_size=config.audio.window_size,
        step_size=config.audio.effective_step_size,
        threshold=config.detection.threshold
    )
    return config
