from __future__ import annotations

import logging
import os
import shutil
import socket
import tarfile
import tempfile
from pathlib import Path
from typing import Optional

from sandrun.config import SandboxConfig
from sandrun.errors import PreconditionError, WorkspaceError
from sandrun.utils.fs import disk_usage_percent


logger = logging.getLogger(__name__)
notify = logging.getLogger("sandrun.notify")


class Workspace:
	"""A disposable directory that one invocation runs inside.

	Entering the workspace makes it the current directory; leaving restores
	the previous one and then releases the directory (delete, archive or keep)
	according to the config and whether the run failed.
	"""

	def __init__(self, path: Path, cfg: SandboxConfig, owned: bool, suffix: str = ""):
		self.path = path
		self.cfg = cfg
		self.owned = owned
		self.suffix = suffix
		self.failed = False
		self.archive_path: Optional[Path] = None
		self._prev_cwd: Optional[str] = None
		self._released = False

	@classmethod
	def acquire(cls, cfg: SandboxConfig) -> "Workspace":
		explicit = cfg.explicit_dir
		target = explicit if explicit is not None else cfg.temp_dir
		_check_disk(target, cfg.fail_if_disk_full_above)

		if explicit is not None:
			path = explicit.expanduser().absolute()
			try:
				path.mkdir(parents=True, exist_ok=True)
			except OSError as e:
				raise WorkspaceError(f"Cannot create working directory {path}: {e}") from e
			logger.info("using caller-supplied workspace %s", path)
			return cls(path, cfg, owned=False)

		root = cfg.temp_dir.expanduser().absolute()
		prefix = f"{cfg.workspace_prefix}-{cfg.tag}-"
		try:
			root.mkdir(parents=True, exist_ok=True)
			path = Path(tempfile.mkdtemp(prefix=prefix, dir=str(root)))
		except OSError as e:
			raise WorkspaceError(f"Cannot create workspace under {root}: {e}") from e
		logger.info("created workspace %s", path)
		return cls(path, cfg, owned=True, suffix=path.name[len(prefix):])

	@property
	def archive_name(self) -> str:
		return f"{self.cfg.workspace_prefix}-failed-{self.cfg.tag}-{self.suffix}.tar.gz"

	def mark_failed(self) -> None:
		self.failed = True

	def relative(self, text: str) -> str:
		"""Strip this workspace's path from ``text`` so logs do not depend on it."""
		base = str(self.path)
		return text.replace(base + os.sep, "").replace(base, ".")

	def release(self) -> None:
		if self._released:
			return
		self._released = True
		if self.cfg.debug:
			logger.warning("debug set, keeping workspace %s", self.path)
			return
		if not self.owned:
			return
		if self.failed and self.cfg.tarball_if_fail and not self._archive():
			logger.warning("keeping workspace %s since it could not be archived", self.path)
			return
		try:
			shutil.rmtree(self.path)
		except OSError as e:
			logger.error("failed to remove workspace %s: %s", self.path, e)

	def _archive(self) -> bool:
		dest = self.path.parent / self.archive_name
		try:
			with tarfile.open(dest, "w:gz") as tar:
				tar.add(str(self.path), arcname=dest.name[: -len(".tar.gz")])
		except (OSError, tarfile.TarError) as e:
			logger.error("failed to archive workspace %s: %s", self.path, e)
			return False
		self.archive_path = dest
		notify.warning("%s: failed run archived to %s", socket.gethostname(), dest)
		return True

	def __enter__(self) -> "Workspace":
		try:
			self._prev_cwd = os.getcwd()
		except FileNotFoundError:
			self._prev_cwd = None
		try:
			os.chdir(self.path)
		except OSError as e:
			self.release()
			raise WorkspaceError(f"Cannot enter workspace {self.path}: {e}") from e
		return self

	def __exit__(self, exc_type, exc, tb) -> None:
		if exc_type is not None:
			self.failed = True
		if self._prev_cwd is not None:
			try:
				os.chdir(self._prev_cwd)
			except OSError as e:
				logger.error("cannot return to %s: %s", self._prev_cwd, e)
		self.release()


def _check_disk(target: Path, threshold: Optional[int]) -> None:
	if threshold is None:
		return
	try:
		used = disk_usage_percent(target)
	except OSError as e:
		raise WorkspaceError(f"Cannot query disk usage for {target}: {e}") from e
	if used > threshold:
		raise PreconditionError(f"Disk holding {target} is {used}% full, above the {threshold}% limit")
	logger.debug("disk holding %s is %d%% full", target, used)
