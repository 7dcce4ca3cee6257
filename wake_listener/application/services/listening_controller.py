# wake_listener/application/services/listening_controller.py

"""Listening Controller - capture loop and listening state machine"""

import functools
import queue
import threading
from enum import Enum
from typing import Callable, Optional

import numpy as np
import structlog

from wake_listener.core.exceptions import CaptureError, CaptureInitError
from wake_listener.core.models import ListeningState, Verdict
from wake_listener.core.pipeline import SlidingWindowBuffer, normalize
from wake_listener.core.ports.i_sample_source import ISampleSource
from .detection_pipeline import DetectionPipeline

logger = structlog.get_logger()

VerdictCallback = Callable[[Verdict], None]
Dispatcher = Callable[[Callable[[], None]], None]


class ControlSignal(Enum):
    """Messages from the control surface to the capture worker"""
    ACKNOWLEDGE = "acknowledge"
    STOP = "stop"


def run_inline(fn: Callable[[], None]) -> None:
    fn()


class ListeningController:
    """
    Owns one listening session at a time.

    States:
    - IDLE: constructed, nothing acquired
    - CAPTURING: worker reads samples, fills windows, classifies each window
    - PAUSED_FOR_ACK: a window triggered, capture released until acknowledged
    - STOPPED: session over; `fatal` tells an error stop from a requested one

    A single worker thread owns the capture resource and the window buffer.
    Only the stop flag, control signals (single-slot queue) and published
    verdicts cross the thread boundary.
    """

    def __init__(
            self,
            source: ISampleSource,
            pipeline: DetectionPipeline,
            sample_rate: int,
            window_size: int,
            step_size: int,
            chunk_size: int = 1024,
            primed: bool = True,
            on_verdict: Optional[VerdictCallback] = None,
            on_trigger: Optional[VerdictCallback] = None,
            on_fatal: Optional[Callable[[Exception], None]] = None,
            on_state_change: Optional[Callable[[ListeningState], None]] = None,
            dispatcher: Optional[Dispatcher] = None,
            join_timeout: float = 5.0
    ):
        """
        Args:
            source: Capture resource (opened/closed by the controller)
            pipeline: Extract/classify/decide strategy
            sample_rate: Capture sample rate (Hz)
            window_size: Samples per analysis window
            step_size: New samples between windows
            chunk_size: Samples per source read
            primed: Start each session with a silent overlap (see SlidingWindowBuffer)
            on_verdict: Called for every completed window
            on_trigger: Called when a verdict triggers
            on_fatal: Called when the session dies on a capture error
            on_state_change: Called after every state transition
            dispatcher: Marshals callbacks onto the presentation context
            join_timeout: Seconds stop() waits for the worker
        """
        self.source = source
        self.pipeline = pipeline
        self.sample_rate = sample_rate
        self.window_size = window_size
        self.step_size = step_size
        self.chunk_size = chunk_size
        self.primed = primed
        self.join_timeout = join_timeout

        self.on_verdict = on_verdict
        self.on_trigger = on_trigger
        self.on_fatal = on_fatal
        self.on_state_change = on_state_change
        self._dispatcher = dispatcher or run_inline

        # Validates window/step before any session starts
        SlidingWindowBuffer(window_size, step_size, primed)

        self._state = ListeningState.IDLE
        self._state_changed = threading.Condition()
        self._control: "queue.Queue[ControlSignal]" = queue.Queue(maxsize=1)
        self._stop_requested = threading.Event()
        self._worker: Optional[threading.Thread] = None
        self._buffer: Optional[SlidingWindowBuffer] = None
        self._starting: Optional[threading.Thread] = None

        self.fatal = False
        self.last_error: Optional[Exception] = None
        self.last_verdict: Optional[Verdict] = None

        self.sessions = 0
        self.window_index = 0
        self.trigger_count = 0
        self.error_verdicts = 0

        logger.info(
            "listening_controller_initialized",
            sample_rate=sample_rate,
            window_size=window_size,
            step_size=step_size,
            chunk_size=chunk_size
        )

    # ========================================
    # STATE
    # ========================================

    @property
    def state(self) -> ListeningState:
        with self._state_changed:
            return self._state

    @property
    def buffered_samples(self) -> int:
        """Samples waiting in the current session's window buffer"""
        return len(self._buffer) if self._buffer is not None else 0

    def _set_state(self, state: ListeningState) -> None:
        with self._state_changed:
            previous, self._state = self._state, state
            self._state_changed.notify_all()

        if previous is not state:
            logger.info("listening_state_changed", previous=previous.value, state=state.value)
            self._dispatch(self.on_state_change, state)

    def wait_for_state(self, state: ListeningState, timeout: Optional[float] = None) -> bool:
        """Block until the controller reaches `state`; False on timeout"""
        with self._state_changed:
            return self._state_changed.wait_for(lambda: self._state is state, timeout=timeout)

    # ========================================
    # CONTROL SURFACE
    # ========================================

    def start(self) -> None:
        """
        Acquire the capture resource and start the worker.

        Raises:
            CaptureInitError: If the source cannot be opened (state -> STOPPED, fatal)
        """
        # Claim the session under the lock; a concurrent start() sees the claim
        with self._state_changed:
            if self._state.is_active or self._starting is not None:
                logger.warning("listening_already_active", state=self._state.value,
                               starting=self._starting is not None)
                return
            self._starting = threading.current_thread()
            self._stop_requested.clear()

        try:
            self._drain_control()
            self.fatal = False
            self.last_error = None

            try:
                self.source.open(self.sample_rate)
            except Exception as e:
                error = e if isinstance(e, CaptureInitError) else CaptureInitError(str(e))
                logger.error("capture_init_failed", error=str(e))
                self.fatal = True
                self.last_error = error
                self._set_state(ListeningState.STOPPED)
                if error is e:
                    raise
                raise error from e

            self.sessions += 1
            self._buffer = SlidingWindowBuffer(self.window_size, self.step_size, self.primed)
            self._worker = threading.Thread(
                target=self._run,
                name=f"wake-listener-capture-{self.sessions}",
                daemon=True
            )
            self._set_state(ListeningState.CAPTURING)
            self._worker.start()

        finally:
            with self._state_changed:
                self._starting = None
                self._state_changed.notify_all()

    def stop(self) -> None:
        """Request the worker to stop; waits for it unless called from the worker"""
        with self._state_changed:
            starting = self._starting
            if not (self._state.is_active or starting is not None):
                logger.debug("listening_not_active", state=self._state.value)
                return
            already_requested = self._stop_requested.is_set()
            # Set under the lock so a start() still opening the source keeps it
            self._stop_requested.set()
            if starting is not None and starting is not threading.current_thread():
                # The worker is spawned by then and can be joined below
                self._state_changed.wait_for(lambda: self._starting is None,
                                             timeout=self.join_timeout)

        if not already_requested:
            logger.info("listening_stop_requested")
            try:
                self._control.put_nowait(ControlSignal.STOP)
            except queue.Full:
                # A pending acknowledgment wakes the worker; it sees the flag next
                pass

        worker = self._worker
        if worker is not None and worker.is_alive() and worker is not threading.current_thread():
            worker.join(self.join_timeout)
            if worker.is_alive():
                logger.warning("capture_worker_still_running", timeout=self.join_timeout)

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the worker to finish; True once it has"""
        worker = self._worker
        if worker is None or worker is threading.current_thread():
            return worker is None
        worker.join(timeout)
        return not worker.is_alive()

    def acknowledge_trigger(self) -> bool:
        """
        Resume capturing after a trigger.

        Returns:
            True if the acknowledgment was accepted
        """
        with self._state_changed:
            if self._state is not ListeningState.PAUSED_FOR_ACK:
                logger.warning("acknowledge_ignored", state=self._state.value)
                return False

        try:
            self._control.put_nowait(ControlSignal.ACKNOWLEDGE)
        except queue.Full:
            logger.debug("acknowledge_already_pending")
            return False

        logger.info("trigger_acknowledged")
        return True

    def _drain_control(self) -> None:
        while True:
            try:
                self._control.get_nowait()
            except queue.Empty:
                return

    # ========================================
    # WORKER
    # ========================================

    def _run(self) -> None:
        logger.info("capture_worker_started", session=self.sessions)

        try:
            while not self._stop_requested.is_set():
                if self.state is ListeningState.PAUSED_FOR_ACK:
                    if not self._wait_for_acknowledgment():
                        break
                    continue

                chunk = self.source.read(self.chunk_size)
                if len(chunk) == 0:
                    logger.info("sample_source_exhausted")
                    break

                self._consume(chunk)

        except Exception as e:
            self.fatal = True
            self.last_error = e
            logger.error("capture_session_failed", error_type=type(e).__name__,
                         error=str(e), exc_info=True)
            self._dispatch(self.on_fatal, e)

        finally:
            self.source.close()
            # Partially filled window is discarded with the session
            if self._buffer is not None:
                self._buffer.reset()
            self._set_state(ListeningState.STOPPED)
            logger.info("capture_worker_finished", fatal=self.fatal, windows=self.window_index)

    def _consume(self, chunk: np.ndarray) -> None:
        """Normalize one chunk, feed it to the buffer, classify completed windows"""
        try:
            samples = normalize(chunk)
        except TypeError as e:
            raise CaptureError(f"sample source returned non-PCM data: {e}") from e

        for window in self._buffer.extend(samples):
            if self._stop_requested.is_set():
                return

            verdict = self.pipeline.process(window, window_index=self.window_index)
            self.window_index += 1
            self.last_verdict = verdict

            if verdict.is_error:
                self.error_verdicts += 1

            self._dispatch(self.on_verdict, verdict)

            if verdict.triggered:
                self._pause_for_acknowledgment(verdict)
                # Rest of this chunk predates the trigger; dropped
                return

    def _pause_for_acknowledgment(self, verdict: Verdict) -> None:
        self.trigger_count += 1
        logger.info("wake_phrase_detected", label=verdict.label, score=verdict.score,
                    window_index=verdict.window_index)

        self.source.close()
        self._set_state(ListeningState.PAUSED_FOR_ACK)
        self._dispatch(self.on_trigger, verdict)

    def _wait_for_acknowledgment(self) -> bool:
        """Block until acknowledged (True) or stopped (False)"""
        signal = self._control.get()

        if signal is ControlSignal.STOP or self._stop_requested.is_set():
            return False

        try:
            self.source.open(self.sample_rate)
        except CaptureInitError:
            raise
        except Exception as e:
            raise CaptureInitError(f"Failed to reopen audio input: {e}") from e

        # No stale samples across a trigger boundary
        self._buffer.reset()
        self._set_state(ListeningState.CAPTURING)
        return True

    # ========================================
    # NOTIFICATIONS
    # ========================================

    def _dispatch(self, callback: Optional[Callable], payload) -> None:
        """Fire-and-forget hand-off to the presentation context"""
        if callback is None:
            return
        try:
            self._dispatcher(functools.partial(callback, payload))
        except Exception as e:
            logger.error("notification_dispatch_failed", callback=getattr(callback, '__name__', repr(callback)),
                         error=str(e))

    def get_statistics(self) -> dict:
        """Statistiky controlleru."""
        return {
            'state': self.state.value,
            'fatal': self.fatal,
            'sessions': self.sessions,
            'windows': self.window_index,
            'triggers': self.trigger_count,
            'error_verdicts': self.error_verdicts,
            'buffered_samples': self.buffered_samples,
            'last_verdict': self.last_verdict.to_dict() if self.last_verdict else None,
            'pipeline': self.pipeline.get_statistics()
        }
