"""Wake Listener - Entry Point"""

import argparse
import asyncio
import sys

from wake_listener.core.logging.logger import setup_from_environment
from wake_listener.core.config.container import setup_container
from wake_listener.core.exceptions import WakeListenerError
from wake_listener.interfaces.cli.console_ui import ConsoleUI

# Setup logging before anything else
setup_from_environment()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Real-time wake phrase listener")
    parser.add_argument("--config", help="Path to YAML config (default: config/wake_listener.yaml)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--once", action="store_true", help="Record one window and classify it")
    mode.add_argument("--file", help="Classify the first window of an audio file")
    return parser.parse_args(argv)


def print_verdict(verdict):
    if verdict.is_error:
        print(f"❌ {verdict.error_type}: {verdict.error}")
    else:
        mark = "✨" if verdict.triggered else "·"
        print(f"{mark} {verdict.label}: {verdict.score * 100:.2f}%")


async def main(args):
    """Application entry point"""
    container = setup_container(args.config)

    if args.file:
        print_verdict(container.one_shot_classifier().classify_file(args.file))
        return
    if args.once:
        print("🎙️  Recording...")
        print_verdict(container.one_shot_classifier().classify_recording(container.sample_source))
        return

    await ConsoleUI(container).run()


if __name__ == "__main__":
    try:
        asyncio.run(main(parse_args()))
    except WakeListenerError as e:
        print(f"\n❌ {type(e).__name__}: {e}\n")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n\n👋 Goodbye!\n")
