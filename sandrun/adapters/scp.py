from __future__ import annotations

import logging
from pathlib import Path

from sandrun.errors import TransportError
from sandrun.utils.proc import run_capture


logger = logging.getLogger(__name__)


class SecureCopy:
	"""Thin wrapper over the scp client, run in batch mode so it never prompts."""

	def __init__(self, command: str = "scp"):
		self.command = command

	def _copy(self, src: str, dst: str) -> None:
		cmd = [self.command, "-q", "-B", src, dst]
		logger.debug("running %s", " ".join(cmd))
		try:
			res = run_capture(cmd)
		except OSError as e:
			raise TransportError(f"Cannot run {self.command}: {e}") from e
		logger.debug("%s exited %d after %.2fs", self.command, res.exit_code, res.duration_s)
		if not res.ok:
			raise TransportError(
				f"{self.command} {src} -> {dst} failed ({res.exit_code}) after {res.duration_s:.1f}s: {res.error_text}"
			)

	def pull(self, host: str, path: str, dest: Path) -> Path:
		self._copy(f"{host}:{path}", str(dest))
		return dest

	def push(self, src: Path, host: str, path: str) -> None:
		self._copy(str(src), f"{host}:{path}")
