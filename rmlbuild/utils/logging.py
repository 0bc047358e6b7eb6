"""
Logging configuration and utilities.

This module provides centralized logging configuration for the
rmlbuild package with appropriate formatting and levels.
"""

import logging
import os
from typing import Optional, Sequence

ROOT_LOGGER_NAME = "rmlbuild"


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Configure logging for the rmlbuild package.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for log output
    """
    if level is None:
        level = os.environ.get("RMLBUILD_LOG_LEVEL", "WARNING")

    log_level = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(log_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the given module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance parented under the rmlbuild logger
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


class BuildLogger:
    """
    Stage-level logging for the build pipeline.

    Wraps a module logger with helpers that keep the messages for each
    pipeline event consistent.
    """

    def __init__(self, name: str):
        """
        Initialize logger for specific component.

        Args:
            name: Component name for logging context
        """
        self.logger = get_logger(name)

    def log_build_start(self, source: str, output_name: str) -> None:
        """Log beginning of a build."""
        self.logger.info(f"Building '{output_name}' from {source}")

    def log_stage_start(self, stage: str, command: Sequence[str]) -> None:
        """
        Log a stage about to run.

        Args:
            stage: Stage label
            command: Full command line
        """
        self.logger.info(f"[{stage}] {' '.join(command)}")

    def log_stage_result(self, stage: str, success: bool, exit_code: int) -> None:
        """Log the outcome of a stage."""
        if success:
            self.logger.debug(f"[{stage}] finished")
        else:
            self.logger.error(f"[{stage}] failed with exit code {exit_code}")

    def log_cleanup(self, directory: str, removed: int) -> None:
        """Log the number of artifacts removed from a directory."""
        self.logger.info(f"Removed {removed} artifact(s) from {directory}")


# Initialize logging on module import
setup_logging()
