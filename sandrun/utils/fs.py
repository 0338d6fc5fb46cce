from __future__ import annotations

import math
import os
import shutil
import tempfile
from pathlib import Path


def ensure_parent(path: Path) -> None:
	path.parent.mkdir(parents=True, exist_ok=True)


def atomic_write_text(path: Path, data: str) -> None:
	ensure_parent(path)
	fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
	try:
		with os.fdopen(fd, "w", encoding="utf-8") as f:
			f.write(data)
		os.replace(tmp, path)
	except BaseException:
		Path(tmp).unlink(missing_ok=True)
		raise


def copy_file(src: Path, dst: Path) -> None:
	ensure_parent(dst)
	shutil.copyfile(src, dst)


def existing_ancestor(path: Path) -> Path:
	p = path.expanduser().absolute()
	while not p.exists() and p != p.parent:
		p = p.parent
	return p


def disk_usage_percent(path: Path) -> int:
	"""Percent of the filesystem holding ``path`` in use, rounded up like df(1)."""
	usage = shutil.disk_usage(existing_ancestor(path))
	avail = usage.used + usage.free
	if avail <= 0:
		return 0
	return math.ceil(usage.used * 100 / avail)


def head_lines(path: Path, n: int) -> list[str]:
	if n <= 0 or not path.exists():
		return []
	lines: list[str] = []
	with path.open("r", encoding="utf-8", errors="replace") as f:
		for line in f:
			lines.append(line.rstrip("\n"))
			if len(lines) >= n:
				break
	return lines
