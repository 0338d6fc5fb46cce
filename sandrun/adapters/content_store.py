"""Directory-backed content-addressed store.

Blobs live under ``objects/<aa>/<sha256>``; ``index.json`` maps a logical
path to the digest and size of its current blob.
"""
from __future__ import annotations

import hashlib
import json
import os
import shutil
from pathlib import Path

from sandrun.errors import TransportError
from sandrun.utils.fs import atomic_write_text, ensure_parent


CHUNK = 1 << 20


def _digest(path: Path) -> str:
	h = hashlib.sha256()
	with path.open("rb") as f:
		for chunk in iter(lambda: f.read(CHUNK), b""):
			h.update(chunk)
	return h.hexdigest()


def normalize_key(path: str) -> str:
	key = path.strip().lstrip("/")
	if not key or any(part in {"", ".", ".."} for part in key.split("/")):
		raise TransportError(f"Invalid content store path: {path!r}")
	return key


class ContentStore:
	def __init__(self, root: Path):
		self.root = Path(root)

	@property
	def index_file(self) -> Path:
		return self.root / "index.json"

	def _object_path(self, digest: str) -> Path:
		return self.root / "objects" / digest[:2] / digest

	def _load_index(self) -> dict:
		if not self.index_file.exists():
			return {}
		try:
			return json.loads(self.index_file.read_text())
		except (OSError, ValueError) as e:
			raise TransportError(f"Unreadable content store index {self.index_file}: {e}") from e

	def exists(self, path: str) -> bool:
		return normalize_key(path) in self._load_index()

	def fetch(self, path: str, dest: Path) -> Path:
		key = normalize_key(path)
		entry = self._load_index().get(key)
		if not entry:
			raise TransportError(f"No such object in content store: {key}")
		blob = self._object_path(entry["digest"])
		if not blob.exists():
			raise TransportError(f"Content store object missing for {key}: {entry['digest']}")
		ensure_parent(dest)
		shutil.copyfile(blob, dest)
		size = dest.stat().st_size
		if size != entry["size"] or _digest(dest) != entry["digest"]:
			dest.unlink(missing_ok=True)
			raise TransportError(f"Incomplete fetch of {key}: expected {entry['size']} bytes")
		return dest

	def put(self, src: Path, path: str) -> str:
		key = normalize_key(path)
		digest = _digest(src)
		blob = self._object_path(digest)
		if not blob.exists():
			ensure_parent(blob)
			tmp = blob.with_name(f".{digest}.{os.getpid()}.tmp")
			shutil.copyfile(src, tmp)
			os.replace(tmp, blob)
		index = self._load_index()
		index[key] = {"digest": digest, "size": src.stat().st_size}
		atomic_write_text(self.index_file, json.dumps(index, indent=2, sort_keys=True))
		return digest
