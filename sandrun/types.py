from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


class Transport(Enum):
	CONTENT_STORE = "cas"
	LOCAL = "file"
	REMOTE = "scp"


@dataclass(frozen=True)
class Location:
	kind: Transport
	path: str
	host: Optional[str] = None

	@property
	def name(self) -> str:
		return Path(self.path).name


@dataclass(frozen=True)
class StepResult:
	index: int
	command: str
	exit_code: int
	stdout_path: Path
	stderr_path: Path

	@property
	def ok(self) -> bool:
		return self.exit_code == 0


@dataclass
class ExecutionResult:
	stdout_path: Path
	stderr_path: Path
	steps: list[StepResult] = field(default_factory=list)

	@property
	def ok(self) -> bool:
		return all(step.ok for step in self.steps)

	@property
	def failed_step(self) -> Optional[StepResult]:
		for step in self.steps:
			if not step.ok:
				return step
		return None

	@property
	def exit_code(self) -> int:
		failed = self.failed_step
		return failed.exit_code if failed else 0

