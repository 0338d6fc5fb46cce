from __future__ import annotations

import subprocess
import time
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class RunOutput:
	"""Captured result of a transport client such as scp."""

	stdout: bytes
	stderr: bytes
	exit_code: int
	duration_s: float

	@property
	def ok(self) -> bool:
		return self.exit_code == 0

	@property
	def error_text(self) -> str:
		return (self.stderr or self.stdout).decode("utf-8", "ignore").strip()


def run_capture(cmd: List[str], timeout: Optional[int] = None) -> RunOutput:
	# Transport clients must never wait on a terminal.
	start = time.monotonic()
	proc = subprocess.run(cmd, stdin=subprocess.DEVNULL, capture_output=True, timeout=timeout)
	return RunOutput(
		stdout=proc.stdout,
		stderr=proc.stderr,
		exit_code=proc.returncode,
		duration_s=time.monotonic() - start,
	)
