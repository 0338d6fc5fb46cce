from __future__ import annotations

import logging

from sandrun.config import SandboxConfig
from sandrun.core.chain import ChainExecutor, CommandChain
from sandrun.core.installer import install
from sandrun.core.relay import relay, report
from sandrun.core.workspace import Workspace
from sandrun.errors import SandrunError
from sandrun.types import ExecutionResult


logger = logging.getLogger(__name__)


def run_sandboxed(cfg: SandboxConfig, command: str) -> ExecutionResult:
	chain = CommandChain.parse(command)
	with Workspace.acquire(cfg) as ws:
		if cfg.install_package:
			install(cfg.install_package, ws, cfg)
		result = ChainExecutor(ws, nice=cfg.random_nice).run(chain)
		if not result.ok:
			ws.mark_failed()
		relay(result.stdout_path, result.stderr_path, cfg)
		report(result, cfg)
	return result


def execute(cfg: SandboxConfig, command: str) -> int:
	try:
		result = run_sandboxed(cfg, command)
	except SandrunError as e:
		logger.error("%s", e)
		return e.exit_code
	if not result.ok:
		logger.info("chain failed with exit code %d", result.exit_code)
	return result.exit_code
