from __future__ import annotations

import logging
import os
import random
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from sandrun.core.workspace import Workspace
from sandrun.errors import ExecutableNotFoundError, UsageError
from sandrun.types import ExecutionResult, StepResult


logger = logging.getLogger(__name__)

SEPARATOR = ";"
CMDLINE_LOG = "cmdline.log"
STDOUT_LOG = "stdout.log"
STDERR_LOG = "stderr.log"
STEP_DIR = ".sandrun"
NICE_RANGE = (0, 15)
SHELL = "/bin/sh"


@dataclass(frozen=True)
class CommandChain:
	commands: tuple[str, ...]

	@classmethod
	def parse(cls, raw: str) -> "CommandChain":
		commands = tuple(part.strip() for part in raw.split(SEPARATOR) if part.strip())
		if not commands:
			raise UsageError("No command given")
		return cls(commands)

	def __iter__(self) -> Iterator[str]:
		return iter(self.commands)

	def __len__(self) -> int:
		return len(self.commands)


def resolve_executable(command: str, cwd: Path) -> str:
	name = command.split()[0]
	if os.sep in name and not os.path.isabs(name):
		found = shutil.which(str(cwd / name))
	else:
		found = shutil.which(name)
	if not found:
		raise ExecutableNotFoundError(f"Executable not found: {name}", executable=name)
	return found


def pick_niceness() -> int:
	return random.randint(*NICE_RANGE)


def _exit_status(returncode: int) -> int:
	# Report signal deaths the way a shell would.
	return 128 - returncode if returncode < 0 else returncode


class ChainExecutor:
	"""Runs a CommandChain inside a workspace, one step at a time, stopping at the first failure."""

	def __init__(self, workspace: Workspace, nice: bool = False):
		self.workspace = workspace
		self.nice = nice
		root = workspace.path
		self.cmdline_log = root / CMDLINE_LOG
		self.stdout_path = root / STDOUT_LOG
		self.stderr_path = root / STDERR_LOG
		self.step_dir = root / STEP_DIR

	def run(self, chain: CommandChain) -> ExecutionResult:
		self.step_dir.mkdir(exist_ok=True)
		for path in (self.cmdline_log, self.stdout_path, self.stderr_path):
			path.write_bytes(b"")

		result = ExecutionResult(stdout_path=self.stdout_path, stderr_path=self.stderr_path)
		for index, command in enumerate(chain):
			step = self._run_step(index, command)
			result.steps.append(step)
			if not step.ok:
				logger.info("step %d failed with %d, stopping chain: %s", index, step.exit_code, command)
				break
		return result

	def _run_step(self, index: int, command: str) -> StepResult:
		resolve_executable(command, self.workspace.path)
		with self.cmdline_log.open("a", encoding="utf-8") as f:
			f.write(self.workspace.relative(command) + "\n")

		out = self.step_dir / f"step-{index}.out"
		err = self.step_dir / f"step-{index}.err"
		preexec = None
		if self.nice:
			niceness = pick_niceness()
			logger.debug("running step %d at niceness %d", index, niceness)
			preexec = lambda: os.nice(niceness)

		logger.debug("running step %d: %s", index, command)
		with out.open("wb") as fout, err.open("wb") as ferr:
			proc = subprocess.run(
				[SHELL, "-c", command],
				cwd=self.workspace.path,
				stdin=subprocess.DEVNULL,
				stdout=fout,
				stderr=ferr,
				preexec_fn=preexec,
				check=False,
			)
		self._append(out, self.stdout_path)
		self._append(err, self.stderr_path)
		return StepResult(
			index=index,
			command=command,
			exit_code=_exit_status(proc.returncode),
			stdout_path=out,
			stderr_path=err,
		)

	@staticmethod
	def _append(src: Path, dst: Path) -> None:
		with src.open("rb") as fin, dst.open("ab") as fout:
			shutil.copyfileobj(fin, fout)


def run(chain: CommandChain, workspace: Workspace, nice_enabled: bool = False) -> ExecutionResult:
	return ChainExecutor(workspace, nice=nice_enabled).run(chain)
