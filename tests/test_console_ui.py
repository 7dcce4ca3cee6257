"""Tests for the console front end"""
import asyncio
import threading
from types import SimpleNamespace

import pytest

from wake_listener.core.models import ListeningState, Verdict
from wake_listener.interfaces.cli.console_ui import ConsoleUI


class FakeController:

    def __init__(self):
        self.started = False
        self.stopped = False
        self.acknowledgments = 0

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True

    def acknowledge_trigger(self):
        self.acknowledgments += 1
        return True

    def get_statistics(self):
        return {'windows': 0}


class FakeContainer:

    def __init__(self):
        self.config = SimpleNamespace(detection=SimpleNamespace(threshold=0.95))
        self.classifier = SimpleNamespace(labels=["background", "target"])
        self.controller = None
        self.callbacks = None

    def listening_controller(self, dispatcher=None, **callbacks):
        self.controller = FakeController()
        self.callbacks = callbacks
        return self.controller


def trigger_verdict():
    return Verdict(label="target", score=0.97, triggered=True, window_index=3)


async def started(ui, container):
    """Start ui.run() and wait until it has built its controller"""
    run = asyncio.ensure_future(ui.run())
    while container.controller is None or not container.controller.started:
        await asyncio.sleep(0.001)
    return run


class TestConsoleUI:

    def test_enter_acknowledges_trigger(self, monkeypatch):
        monkeypatch.setattr("builtins.input", lambda prompt="": "")
        container = FakeContainer()
        ui = ConsoleUI(container)

        async def scenario():
            run = await started(ui, container)
            ui._on_trigger(trigger_verdict())
            await asyncio.wait_for(ui._confirm_task, 5.0)

            ui._on_state_change(ListeningState.STOPPED)
            await asyncio.wait_for(run, 5.0)

        asyncio.run(scenario())

        assert container.controller.acknowledgments == 1
        assert container.controller.stopped

    def test_closed_stdin_ends_listening(self, monkeypatch):
        def closed(prompt=""):
            raise EOFError

        monkeypatch.setattr("builtins.input", closed)
        container = FakeContainer()
        ui = ConsoleUI(container)

        async def scenario():
            run = await started(ui, container)
            ui._on_trigger(trigger_verdict())
            await asyncio.wait_for(run, 5.0)

        asyncio.run(scenario())

        assert container.controller.acknowledgments == 0
        assert container.controller.stopped

    def test_interrupt_during_prompt_does_not_hang(self, monkeypatch):
        release = threading.Event()

        def blocked(prompt=""):
            release.wait(10.0)
            return ""

        monkeypatch.setattr("builtins.input", blocked)
        container = FakeContainer()
        ui = ConsoleUI(container)

        async def scenario():
            run = await started(ui, container)
            ui._on_trigger(trigger_verdict())
            await asyncio.sleep(0.01)

            # What Ctrl+C does to the main task under asyncio.run
            run.cancel()
            with pytest.raises(asyncio.CancelledError):
                await run
            await asyncio.sleep(0)
            return ui._confirm_task

        try:
            confirm_task = asyncio.run(asyncio.wait_for(scenario(), 5.0))
        finally:
            release.set()

        assert confirm_task.cancelled()
        assert container.controller.stopped
        assert container.controller.acknowledgments == 0

    def test_second_trigger_keeps_one_prompt(self, monkeypatch):
        release = threading.Event()

        def blocked(prompt=""):
            release.wait(10.0)
            return ""

        monkeypatch.setattr("builtins.input", blocked)
        container = FakeContainer()
        ui = ConsoleUI(container)

        async def scenario():
            run = await started(ui, container)
            ui._on_trigger(trigger_verdict())
            first = ui._confirm_task
            ui._on_trigger(trigger_verdict())
            assert ui._confirm_task is first

            release.set()
            await asyncio.wait_for(first, 5.0)
            ui._on_state_change(ListeningState.STOPPED)
            await asyncio.wait_for(run, 5.0)

        try:
            asyncio.run(scenario())
        finally:
            release.set()

        assert container.controller.acknowledgments == 1
