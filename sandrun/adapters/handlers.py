from __future__ import annotations

from pathlib import Path

from sandrun.adapters.base import Adapter
from sandrun.adapters.content_store import ContentStore
from sandrun.adapters.scp import SecureCopy
from sandrun.config import SandboxConfig
from sandrun.errors import TransportError
from sandrun.types import Location, Transport
from sandrun.utils.fs import copy_file


class LocalAdapter:
	kind = Transport.LOCAL

	def fetch(self, loc: Location, dest_dir: Path) -> Path:
		# Already local; nothing to copy.
		return Path(loc.path).expanduser()

	def push(self, src: Path, loc: Location) -> None:
		try:
			copy_file(src, Path(loc.path).expanduser())
		except OSError as e:
			raise TransportError(f"Cannot copy {src} to {loc.path}: {e}") from e


class ContentStoreAdapter:
	kind = Transport.CONTENT_STORE

	def __init__(self, store: ContentStore):
		self.store = store

	def fetch(self, loc: Location, dest_dir: Path) -> Path:
		try:
			return self.store.fetch(loc.path, dest_dir / loc.name)
		except OSError as e:
			raise TransportError(f"Cannot fetch {loc.path} from content store: {e}") from e

	def push(self, src: Path, loc: Location) -> None:
		try:
			self.store.put(src, loc.path)
		except OSError as e:
			raise TransportError(f"Cannot store {src} as {loc.path}: {e}") from e


class ScpAdapter:
	kind = Transport.REMOTE

	def __init__(self, scp: SecureCopy):
		self.scp = scp

	def fetch(self, loc: Location, dest_dir: Path) -> Path:
		return self.scp.pull(loc.host or "", loc.path, dest_dir / loc.name)

	def push(self, src: Path, loc: Location) -> None:
		self.scp.push(src, loc.host or "", loc.path)


def get_adapter(kind: Transport, cfg: SandboxConfig) -> Adapter:
	if kind is Transport.CONTENT_STORE:
		return ContentStoreAdapter(ContentStore(cfg.cas_root))
	if kind is Transport.REMOTE:
		return ScpAdapter(SecureCopy(cfg.scp_command))
	return LocalAdapter()
