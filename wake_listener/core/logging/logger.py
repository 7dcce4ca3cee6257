"""Structured logging setup with dual output"""

import structlog
import logging
import os
import sys
from pathlib import Path

DEFAULT_LOG_FILE = "logs/wake_listener.log"
THIRD_PARTY_LOGGERS = ["onnxruntime", "openwakeword", "numba", "librosa", "audioread"]


def setup_logging(
    mode: str = "production",
    file_level: str = "DEBUG",
    log_file: str = DEFAULT_LOG_FILE
):
    """
    Setup dual logging:
    - Terminal: minimal output (ERROR+ in production, DEBUG+ in dev)
    - File: everything at file_level and above (DEBUG+ by default)
    """
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    if mode == "development":
        terminal_level = "DEBUG"
    else:
        terminal_level = "ERROR"

    terminal_log_level = getattr(logging, terminal_level, logging.ERROR)
    file_log_level = getattr(logging, file_level.upper(), logging.DEBUG)

    # ===== FILE HANDLER =====
    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(file_log_level)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s [%(levelname)8s] %(name)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    # ===== CONSOLE HANDLER =====
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(terminal_log_level)
    if mode == "development":
        console_handler.setFormatter(logging.Formatter('%(message)s'))
    else:
        console_handler.setFormatter(logging.Formatter('❌ %(message)s'))

    # ===== ROOT LOGGER =====
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    # ===== STRUCTLOG =====
    if mode == "development":
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
                structlog.processors.add_log_level,
                structlog.dev.ConsoleRenderer(colors=True)
            ],
            wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
            cache_logger_on_first_use=True,
        )
    else:
        # Console stays quiet, everything goes through stdlib handlers
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.KeyValueRenderer(key_order=["event", "level"]),
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.make_filtering_bound_logger(file_log_level),
            cache_logger_on_first_use=True,
        )

    for logger_name in THIRD_PARTY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.ERROR)

    return root_logger


def setup_production_logging(log_file: str = DEFAULT_LOG_FILE):
    """Production mode - clean terminal, errors only"""
    return setup_logging(mode="production", log_file=log_file)


def setup_dev_logging(log_file: str = DEFAULT_LOG_FILE):
    """Development mode - verbose terminal"""
    return setup_logging(mode="development", log_file=log_file)


def setup_from_environment():
    """
    Pick the logging mode from the environment.

    DEV_MODE=true selects development logging; WAKE_LISTENER_LOG_FILE
    overrides the log file location.
    """
    log_file = os.getenv("WAKE_LISTENER_LOG_FILE", DEFAULT_LOG_FILE)
    if os.getenv("DEV_MODE", "false").lower() == "true":
        return setup_dev_logging(log_file)
    return setup_production_logging(log_file)
