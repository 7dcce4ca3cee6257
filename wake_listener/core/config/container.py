# wake_listener/core/config/container.py

"""
Dependency Injection Container
"""

import os
from typing import Callable, Optional

import structlog
from dotenv import load_dotenv

from wake_listener.core.config.settings import Config, load_config
from wake_listener.core.exceptions import ContainerInitializationError, WakeListenerError
from wake_listener.core.models import LabelSet
from wake_listener.core.ports.i_classifier import IClassifier
from wake_listener.core.ports.i_feature_extractor import IFeatureExtractor
from wake_listener.core.ports.i_model_runner import IModelRunner
from wake_listener.core.ports.i_sample_source import ISampleSource

from wake_listener.application.services import DetectionPipeline, ListeningController, OneShotClassifier

from wake_listener.infrastructure.adapters.features import DirectFeatures, SpectrogramFeatures
from wake_listener.infrastructure.adapters.classifiers import (
    DirectClassifier,
    SpectrogramClassifier,
    OnnxModelRunner
)

logger = structlog.get_logger()

DEFAULT_CONFIG_PATH = "config/wake_listener.yaml"


class Container:
    """
    Dependency Injection Container
    Builds the detection strategy once and wires it to capture and control.
    """

    def __init__(
            self,
            config: Optional[Config] = None,
            config_path: Optional[str] = None,
            sample_source: Optional[ISampleSource] = None,
            model_runner: Optional[IModelRunner] = None
    ):
        """
        Args:
            config: Ready configuration (skips loading)
            config_path: YAML path (default: $WAKE_LISTENER_CONFIG or config/wake_listener.yaml)
            sample_source: Capture source override (default: microphone)
            model_runner: Model runner override (default: ONNX Runtime)
        """
        logger.info("container_initialization_started")

        try:
            # Step 1: Environment and configuration
            self._load_environment()
            self.config = config or self._load_config(config_path)

            # Step 2: Detection strategy (model loads exactly once, here)
            self.model_runner = model_runner
            self.classifier = self._create_classifier()
            self.extractor = self._create_extractor()
            self.pipeline = self._create_pipeline()

            # Step 3: Capture
            self.sample_source = sample_source or self._create_sample_source()

            logger.info("container_initialization_completed")

        except WakeListenerError:
            # Typed setup errors (ModelLoadError, ConfigurationError) reach the caller as-is
            logger.error("container_initialization_failed", exc_info=True)
            raise
        except Exception as e:
            logger.error("container_initialization_failed", error=str(e), exc_info=True)
            raise ContainerInitializationError(f"Failed to initialize container: {e}") from e

    # ========================================
    # ENVIRONMENT & CONFIG
    # ========================================

    def _load_environment(self) -> None:
        """Load environment variables from .env file"""
        load_dotenv()
        logger.debug("environment_loaded", config_override=bool(os.getenv("WAKE_LISTENER_CONFIG")))

    def _load_config(self, config_path: Optional[str]) -> Config:
        path = config_path or os.getenv("WAKE_LISTENER_CONFIG", DEFAULT_CONFIG_PATH)
        return load_config(path)

    # ========================================
    # DETECTION STRATEGY
    # ========================================

    def _create_classifier(self) -> IClassifier:
        """Create the classifier variant named by model.kind"""
        model_cfg = self.config.model
        window_size = self.config.audio.window_size

        if model_cfg.kind == 'openwakeword':
            from wake_listener.infrastructure.adapters.classifiers.openwakeword_classifier import (
                OpenWakeWordClassifier
            )
            classifier = OpenWakeWordClassifier(
                window_size=window_size,
                keywords=model_cfg.wakeword_models,
                labels=LabelSet(model_cfg.labels) if model_cfg.labels else None
            )
        else:
            if self.model_runner is None:
                self.model_runner = OnnxModelRunner(model_cfg.path, input_shape=model_cfg.input_shape)

            classifier_cls = SpectrogramClassifier if model_cfg.kind == 'spectrogram' else DirectClassifier
            classifier = classifier_cls(
                runner=self.model_runner,
                labels=LabelSet(model_cfg.labels),
                activation=model_cfg.activation
            )

        logger.debug("classifier_created", kind=model_cfg.kind)
        return classifier

    def _create_extractor(self) -> IFeatureExtractor:
        """Create the feature extractor matching the classifier input"""
        feature_cfg = self.config.features
        audio_cfg = self.config.audio

        if feature_cfg.kind == 'spectrogram':
            extractor = SpectrogramFeatures(
                sample_rate=audio_cfg.sample_rate,
                window_size=audio_cfg.window_size,
                frame_length=feature_cfg.frame_length,
                hop_length=feature_cfg.hop_length,
                window_fn=feature_cfg.window_fn,
                scale=feature_cfg.scale,
                n_mels=feature_cfg.n_mels,
                normalize=feature_cfg.normalize,
                output_shape=feature_cfg.output_shape,
                input_shape=self.classifier.input_shape
            )
        else:
            extractor = DirectFeatures(
                window_size=audio_cfg.window_size,
                input_shape=self.classifier.input_shape
            )

        logger.debug("extractor_created", kind=feature_cfg.kind, output_shape=extractor.output_shape)
        return extractor

    def _create_pipeline(self) -> DetectionPipeline:
        pipeline = DetectionPipeline(
            extractor=self.extractor,
            classifier=self.classifier,
            threshold=self.config.detection.to_threshold_config(),
            latency_budget=self.config.audio.step_seconds
        )
        pipeline.verify_latency_budget(
            self.config.audio.window_size,
            enforce=self.config.detection.enforce_latency_budget
        )
        return pipeline

    # ========================================
    # CAPTURE
    # ========================================

    def _create_sample_source(self) -> ISampleSource:
        """Create microphone source"""
        # sounddevice needs PortAudio at import time; only load it when used
        from wake_listener.infrastructure.adapters.audio.sounddevice_source import SoundDeviceSource

        audio_cfg = self.config.audio
        return SoundDeviceSource(device=audio_cfg.device, gain=audio_cfg.gain)

    # ========================================
    # PUBLIC INTERFACE
    # ========================================

    def listening_controller(self, dispatcher: Optional[Callable] = None, **callbacks) -> ListeningController:
        """
        Create a listening controller for the configured source

        Args:
            dispatcher: Marshals notifications onto the presentation context
            **callbacks: on_verdict / on_trigger / on_fatal / on_state_change
        """
        audio_cfg = self.config.audio
        return ListeningController(
            source=self.sample_source,
            pipeline=self.pipeline,
            sample_rate=audio_cfg.sample_rate,
            window_size=audio_cfg.window_size,
            step_size=audio_cfg.effective_step_size,
            chunk_size=audio_cfg.chunk_size,
            primed=audio_cfg.prime_with_silence,
            dispatcher=dispatcher,
            **callbacks
        )

    def one_shot_classifier(self) -> OneShotClassifier:
        audio_cfg = self.config.audio
        return OneShotClassifier(
            pipeline=self.pipeline,
            sample_rate=audio_cfg.sample_rate,
            window_size=audio_cfg.window_size,
            chunk_size=audio_cfg.chunk_size
        )


def setup_container(config_path: Optional[str] = None) -> Container:
    """
    Setup and initialize dependency injection container

    Raises:
        ModelLoadError / ConfigurationError: On invalid setup
        ContainerInitializationError: On any other failure
    """
    return Container(config_path=config_path)
