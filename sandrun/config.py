from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


DEFAULT_TAG = "run"
DEFAULT_PREFIX = "sandrun"
DEFAULT_EXCERPT_LINES = 10
DEFAULT_INSTALL_JITTER_SECONDS = 1.0
STATE_DIR = Path(os.getenv("HOME", "~")).expanduser() / ".sandrun"


def _env_path(name: str, default: Path) -> Path:
	value = os.getenv(name)
	return Path(value).expanduser() if value else default


def _absolute(path: str) -> str:
	return str(Path(path).expanduser().absolute())


def anchor_location(uri: str, allow_bare_path: bool = False) -> str:
	"""Rewrite a relative local location against the current directory.

	The workspace scope changes the process cwd before installs and relays
	happen, so ``file:`` paths (and bare paths, where accepted) are pinned
	while the caller's directory is still current. Other forms pass through.
	"""
	if uri.startswith("file:") and not uri.startswith("file://"):
		rest = uri[len("file:"):]
		return f"file:{_absolute(rest)}" if rest else uri
	if allow_bare_path and uri and ":" not in uri:
		return _absolute(uri)
	return uri


class SandboxConfig(BaseModel):
	"""Everything one invocation needs, resolved once from flags and environment."""

	model_config = ConfigDict(frozen=True)

	temp_dir: Path = Field(
		default_factory=lambda: _env_path("SANDRUN_TMPDIR", Path(tempfile.gettempdir())),
		validate_default=True,
	)
	working_dir: Optional[Path] = Field(default=None, description="Explicit workspace, created if missing")
	use_dir: Optional[Path] = Field(default=None, description="Explicit workspace, alias of working_dir")
	tag: str = Field(default=DEFAULT_TAG)
	debug: bool = False
	install_package: Optional[str] = Field(default=None, description="cas:PATH | file:PATH | host:PATH")
	echo_stdout: bool = False
	random_nice: bool = False
	fail_if_disk_full_above: Optional[int] = Field(default=None, ge=0, le=99)
	tarball_if_fail: bool = False
	stdout_copy_path: Optional[str] = None
	stderr_copy_path: Optional[str] = None

	cas_root: Path = Field(
		default_factory=lambda: _env_path("SANDRUN_CAS_ROOT", STATE_DIR / "cas"),
		validate_default=True,
	)
	scp_command: str = Field(default_factory=lambda: os.getenv("SANDRUN_SCP", "scp"))
	install_jitter_s: float = Field(
		default_factory=lambda: float(os.getenv("SANDRUN_INSTALL_JITTER", DEFAULT_INSTALL_JITTER_SECONDS)),
		ge=0,
	)
	excerpt_lines: int = Field(default=DEFAULT_EXCERPT_LINES, ge=0)
	workspace_prefix: str = DEFAULT_PREFIX

	@field_validator("tag")
	@classmethod
	def _check_tag(cls, value: str) -> str:
		if not value or "/" in value or value in {".", ".."}:
			raise ValueError(f"invalid tag {value!r}")
		return value

	@field_validator("temp_dir", "working_dir", "use_dir", "cas_root")
	@classmethod
	def _absolute_dirs(cls, value: Optional[Path]) -> Optional[Path]:
		return value.expanduser().absolute() if value is not None else None

	@field_validator("install_package")
	@classmethod
	def _anchor_install(cls, value: Optional[str]) -> Optional[str]:
		return anchor_location(value) if value else value

	@field_validator("stdout_copy_path", "stderr_copy_path")
	@classmethod
	def _anchor_relay(cls, value: Optional[str]) -> Optional[str]:
		return anchor_location(value, allow_bare_path=True) if value else value

	@model_validator(mode="after")
	def _check_dirs(self) -> "SandboxConfig":
		if self.working_dir is not None and self.use_dir is not None:
			raise ValueError("--working-dir and --use-dir are mutually exclusive")
		return self

	@property
	def explicit_dir(self) -> Optional[Path]:
		return self.working_dir or self.use_dir
