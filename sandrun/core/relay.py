from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from sandrun.adapters import get_adapter, parse_location
from sandrun.config import SandboxConfig
from sandrun.errors import RelayWarning, TransportError
from sandrun.types import ExecutionResult
from sandrun.utils.fs import head_lines


logger = logging.getLogger(__name__)


def copy_to(src: Path, uri: str, cfg: SandboxConfig) -> None:
	try:
		loc = parse_location(uri, allow_bare_path=True)
	except ValueError as e:
		raise RelayWarning(f"Unsupported relay destination {uri!r}: {e}") from e
	try:
		get_adapter(loc.kind, cfg).push(src, loc)
	except TransportError as e:
		raise RelayWarning(str(e)) from e


def relay(stdout_path: Path, stderr_path: Path, cfg: SandboxConfig) -> list[str]:
	"""Copy captured output to the configured destinations.

	Failures are logged and returned as messages; they never affect the run.
	"""
	warnings: list[str] = []
	targets: list[tuple[Path, Optional[str]]] = [
		(stdout_path, cfg.stdout_copy_path),
		(stderr_path, cfg.stderr_copy_path),
	]
	for src, uri in targets:
		if not uri:
			continue
		try:
			copy_to(src, uri, cfg)
			logger.info("copied %s to %s", src.name, uri)
		except RelayWarning as e:
			logger.warning("could not copy %s to %s: %s", src.name, uri, e)
			warnings.append(str(e))
	return warnings


def report(result: ExecutionResult, cfg: SandboxConfig) -> None:
	if result.ok:
		if cfg.echo_stdout and result.stdout_path.exists():
			typer.echo(result.stdout_path.read_text(encoding="utf-8", errors="replace"), nl=False)
		return
	failed = result.failed_step
	source = failed.stderr_path if failed else result.stderr_path
	for line in head_lines(source, cfg.excerpt_lines):
		typer.echo(line)
