from __future__ import annotations

import logging
import random
import tarfile
import time
from pathlib import Path

from sandrun.adapters import get_adapter, parse_location
from sandrun.config import SandboxConfig
from sandrun.core.workspace import Workspace
from sandrun.errors import InstallError, TransportError


logger = logging.getLogger(__name__)

TARBALL_SUFFIXES = (".tar.gz", ".tgz")


def is_tarball(path: Path) -> bool:
	return path.name.endswith(TARBALL_SUFFIXES)


def jitter(max_seconds: float) -> float:
	if max_seconds <= 0:
		return 0.0
	delay = random.uniform(0, max_seconds)
	time.sleep(delay)
	return delay


def install(uri: str, workspace: Workspace, cfg: SandboxConfig) -> Path:
	"""Fetch ``uri`` into ``workspace`` and unpack it when it is a tarball.

	Returns the local file that was installed.
	"""
	try:
		loc = parse_location(uri)
	except ValueError as e:
		raise InstallError(f"Unsupported install source {uri!r}: {e}") from e

	# Spread out many sandboxes pulling from the same distribution point.
	delay = jitter(cfg.install_jitter_s)
	logger.debug("install jitter %.3fs", delay)

	adapter = get_adapter(loc.kind, cfg)
	try:
		local = adapter.fetch(loc, workspace.path)
	except TransportError as e:
		raise InstallError(f"Cannot fetch {uri}: {e}") from e

	if not local.is_file():
		raise InstallError(f"Install source {uri} did not produce a file at {local}")

	if is_tarball(local):
		_extract(local, workspace.path)
	logger.info("installed %s from %s", local, uri)
	return local


def _extract(archive: Path, dest: Path) -> None:
	try:
		with tarfile.open(archive, "r:gz") as tar:
			if hasattr(tarfile, "data_filter"):
				tar.extractall(dest, filter="data")
			else:
				_check_members(tar.getmembers(), dest)
				tar.extractall(dest)
	except (OSError, tarfile.TarError) as e:
		raise InstallError(f"Cannot extract {archive}: {e}") from e


def _check_members(members: list[tarfile.TarInfo], dest: Path) -> None:
	"""Refuse what the ``data`` filter refuses, for interpreters that lack it."""
	root = dest.resolve()
	for m in members:
		if not (m.isfile() or m.isdir() or m.issym() or m.islnk()):
			raise InstallError(f"Refusing special file {m.name!r} in package")
		target = (root / m.name).resolve()
		if m.name.startswith("/") or not target.is_relative_to(root):
			raise InstallError(f"Refusing {m.name!r}, it would land outside {dest}")
		if m.issym():
			link = (target.parent / m.linkname).resolve()
		elif m.islnk():
			link = (root / m.linkname).resolve()
		else:
			continue
		if m.linkname.startswith("/") or not link.is_relative_to(root):
			raise InstallError(f"Refusing link {m.name!r} -> {m.linkname!r}, it points outside {dest}")
