"""
Logging configuration for the sandrun CLI.

Diagnostics go to stderr through rich so that stdout stays reserved for the
captured output of the command chain.
"""
from __future__ import annotations

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


DEFAULT_LEVEL = os.getenv("SANDRUN_LOG_LEVEL", "WARNING")
LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
	log_level = getattr(logging, (level or DEFAULT_LEVEL).upper(), logging.WARNING)

	root = logging.getLogger("sandrun")
	for handler in list(root.handlers):
		root.removeHandler(handler)
		handler.close()

	handlers: list[logging.Handler] = [
		RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=False),
	]
	if log_file:
		file_handler = logging.FileHandler(log_file)
		file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
		handlers.append(file_handler)

	for handler in handlers:
		root.addHandler(handler)
	root.setLevel(log_level)
