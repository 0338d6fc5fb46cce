from sandrun.config import SandboxConfig
from sandrun.core.chain import ChainExecutor, CommandChain
from sandrun.core.installer import install
from sandrun.core.relay import relay, report
from sandrun.core.runner import execute, run_sandboxed
from sandrun.core.workspace import Workspace
from sandrun.types import ExecutionResult, StepResult

__all__ = [
	"SandboxConfig",
	"ChainExecutor",
	"CommandChain",
	"ExecutionResult",
	"StepResult",
	"Workspace",
	"execute",
	"install",
	"relay",
	"report",
	"run_sandboxed",
]
