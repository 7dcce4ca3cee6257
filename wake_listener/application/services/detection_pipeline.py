# wake_listener/application/services/detection_pipeline.py

"""Extract -> classify -> decide for one analysis window."""

import time
from typing import Optional

import numpy as np
import structlog

from wake_listener.core.exceptions import ConfigurationError, WakeListenerError
from wake_listener.core.models import ThresholdConfig, Verdict
from wake_listener.core.pipeline import decide
from wake_listener.core.ports.i_classifier import IClassifier
from wake_listener.core.ports.i_feature_extractor import IFeatureExtractor

logger = structlog.get_logger()


class DetectionPipeline:
    """
    One detection strategy: a feature extractor paired with the classifier
    that understands its tensors, plus the threshold policy.

    The pair is chosen once at configuration time; process() never inspects
    types. Every window yields a Verdict. Failures become error verdicts and
    never propagate to the caller.
    """

    def __init__(
            self,
            extractor: IFeatureExtractor,
            classifier: IClassifier,
            threshold: ThresholdConfig,
            latency_budget: Optional[float] = None
    ):
        """
        Args:
            extractor: Window -> tensor
            classifier: Tensor -> scores
            threshold: Trigger policy
            latency_budget: Seconds available per window (step / sample_rate)
        """
        threshold.validate(classifier.labels)

        self.extractor = extractor
        self.classifier = classifier
        self.threshold = threshold
        self.latency_budget = latency_budget

        self.windows_processed = 0
        self.error_count = 0
        self.over_budget_count = 0
        self.last_latency: Optional[float] = None

        logger.info(
            "detection_pipeline_initialized",
            extractor=type(extractor).__name__,
            classifier=type(classifier).__name__,
            labels=list(classifier.labels),
            threshold=threshold.threshold,
            target_index=threshold.target_index,
            latency_budget=latency_budget
        )

    def process(self, window: np.ndarray, window_index: int = 0) -> Verdict:
        """Run one window through the strategy; never raises"""
        started = time.perf_counter()
        self.windows_processed += 1

        try:
            tensor = self.extractor.extract(window)
            result = self.classifier.classify(tensor)
            decision = decide(result, self.threshold)
        except WakeListenerError as e:
            self.error_count += 1
            logger.error(
                "window_processing_failed",
                window_index=window_index,
                error_type=type(e).__name__,
                error=str(e)
            )
            return Verdict.from_error(e, window_index=window_index)
        except Exception as e:
            # A bad window must not end the capture session
            self.error_count += 1
            logger.error(
                "window_processing_crashed",
                window_index=window_index,
                error_type=type(e).__name__,
                error=str(e),
                exc_info=True
            )
            return Verdict.from_error(e, window_index=window_index)
        finally:
            self._track_latency(time.perf_counter() - started, window_index)

        logger.debug(
            "window_classified",
            window_index=window_index,
            label=decision.label,
            score=round(decision.score, 4),
            triggered=decision.triggered
        )
        return Verdict.from_decision(decision, window_index=window_index)

    def _track_latency(self, elapsed: float, window_index: int) -> None:
        self.last_latency = elapsed
        if self.latency_budget is not None and elapsed > self.latency_budget:
            self.over_budget_count += 1
            logger.warning(
                "window_over_latency_budget",
                window_index=window_index,
                elapsed_ms=round(elapsed * 1000, 1),
                budget_ms=round(self.latency_budget * 1000, 1)
            )

    def verify_latency_budget(self, window_size: int, enforce: bool = False,
                              runs: int = 3) -> float:
        """
        Time extract+classify on a silent window.

        Returns:
            Median latency in seconds

        Raises:
            ConfigurationError: If enforce is set and the median exceeds the budget
        """
        window = np.zeros(window_size, dtype=np.float32)
        timings = []

        for _ in range(runs):
            started = time.perf_counter()
            try:
                self.classifier.classify(self.extractor.extract(window))
            except WakeListenerError as e:
                # A silent window may legitimately fail extraction (dB scale)
                logger.debug("latency_probe_window_failed", error=str(e))
            timings.append(time.perf_counter() - started)

        median = float(np.median(timings))

        if self.latency_budget is not None and median > self.latency_budget:
            logger.warning(
                "latency_budget_exceeded",
                median_ms=round(median * 1000, 1),
                budget_ms=round(self.latency_budget * 1000, 1)
            )
            if enforce:
                raise ConfigurationError(
                    f"classification takes {median:.3f}s per window but only "
                    f"{self.latency_budget:.3f}s are available; increase the step size"
                )
        else:
            logger.info("latency_budget_ok", median_ms=round(median * 1000, 1))

        return median

    def get_statistics(self) -> dict:
        return {
            'windows_processed': self.windows_processed,
            'errors': self.error_count,
            'over_budget': self.over_budget_count,
            'last_latency_ms': round(self.last_latency * 1000, 2) if self.last_latency else None
        }
