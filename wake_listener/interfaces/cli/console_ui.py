"""CLI presentation layer for the listening controller"""

import asyncio
import threading
from typing import Optional

import structlog

from wake_listener.core.models import ListeningState, Verdict

logger = structlog.get_logger()


class ConsoleUI:
    """Console front end: live scores, trigger prompt, fatal stop"""

    def __init__(self, container):
        self.container = container
        self.config = container.config
        self.controller = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stopped: Optional[asyncio.Event] = None
        self._confirm_task: Optional[asyncio.Task] = None
        logger.info("console_ui_initialized")

    async def run(self):
        """Main UI loop"""
        self._loop = asyncio.get_running_loop()
        self._stopped = asyncio.Event()

        self.controller = self.container.listening_controller(
            dispatcher=self._loop.call_soon_threadsafe,
            on_verdict=self._on_verdict,
            on_trigger=self._on_trigger,
            on_fatal=self._on_fatal,
            on_state_change=self._on_state_change
        )

        self._print_header()
        self.controller.start()

        try:
            await self._stopped.wait()
        finally:
            if self._confirm_task is not None and not self._confirm_task.done():
                self._confirm_task.cancel()
            await self._loop.run_in_executor(None, self.controller.stop)
            print(f"\n📊 {self.controller.get_statistics()}")

    def _print_header(self):
        labels = ", ".join(self.container.classifier.labels)
        print("\n" + "═" * 60)
        print("  🎤  Wake Listener".center(60))
        print("═" * 60)
        print(f"\n  🏷️  Labels: {labels}")
        print(f"  🎯 Threshold: {self.config.detection.threshold:.2f}")
        print("  🔇 Press Ctrl+C to exit\n")
        print("═" * 60 + "\n")

    def _on_verdict(self, verdict: Verdict):
        """Every completed window"""
        if verdict.is_error:
            print(f"\n❌ [{verdict.window_index}] {verdict.error_type}: {verdict.error}")
            return
        print(f"   🎯 {verdict.label}: {verdict.score * 100:.2f}%   ", end="\r", flush=True)

    def _on_trigger(self, verdict: Verdict):
        if self._confirm_task is not None and not self._confirm_task.done():
            logger.debug("trigger_prompt_already_open", window_index=verdict.window_index)
            return
        self._confirm_task = self._loop.create_task(self._confirm_trigger(verdict))

    async def _confirm_trigger(self, verdict: Verdict):
        print(f"\n\n✨ Wake phrase detected! {verdict.label}: {verdict.score * 100:.2f}%")
        logger.info("trigger_prompt", **verdict.to_dict())

        line = await self._read_line("   Press Enter to keep listening... ")
        if line is None:
            # stdin closed, nobody can acknowledge
            logger.info("console_input_closed")
            self._stopped.set()
            return

        self.controller.acknowledge_trigger()
        print("🎙️  Listening...\n")

    def _read_line(self, prompt: str) -> "asyncio.Future[Optional[str]]":
        """
        Read one line from stdin without tying up the loop's executor.

        input() cannot be interrupted, so it runs on a daemon thread that
        an exiting interpreter does not wait for. Cancelling the returned
        future abandons the read.

        Returns:
            Future with the line, or None on EOF
        """
        loop = self._loop
        future = loop.create_future()

        def resolve(line):
            if not future.done():
                future.set_result(line)

        def reader():
            try:
                line = input(prompt)
            except EOFError:
                line = None
            try:
                loop.call_soon_threadsafe(resolve, line)
            except RuntimeError:
                # Loop already closed; the prompt was abandoned
                logger.debug("console_input_after_shutdown")

        threading.Thread(target=reader, name="console-input", daemon=True).start()
        return future

    def _on_fatal(self, error: Exception):
        print(f"\n❌ Listening stopped: {error}\n")

    def _on_state_change(self, state: ListeningState):
        if state is ListeningState.STOPPED:
            self._stopped.set()
