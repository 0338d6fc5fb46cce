from __future__ import annotations

import re
from pathlib import Path
from typing import Protocol
from urllib.parse import urlparse

from sandrun.types import Location, Transport


_REMOTE = re.compile(r"^(?P<host>[A-Za-z0-9_.@\-\[\]]+):(?P<path>[^/].*|/[^/].*)$")


class Adapter(Protocol):
	kind: Transport

	def fetch(self, loc: Location, dest_dir: Path) -> Path:
		...

	def push(self, src: Path, loc: Location) -> None:
		...


def parse_location(uri: str, allow_bare_path: bool = False) -> Location:
	"""Classify ``uri`` into one of the closed set of transports.

	``cas:`` and ``cas://`` name content store paths, ``file:`` names a local
	path and ``host:path`` a remote file reached over scp. Bare paths are only
	accepted when ``allow_bare_path`` is set. Anything else raises ValueError.
	"""
	uri = uri.strip()
	if not uri:
		raise ValueError("empty location")
	if uri.startswith("cas:"):
		parsed = urlparse(uri)
		path = (parsed.netloc + parsed.path).lstrip("/")
		if not path:
			raise ValueError(f"missing content store path in {uri!r}")
		return Location(kind=Transport.CONTENT_STORE, path=path)
	if uri.startswith("file:"):
		parsed = urlparse(uri)
		if parsed.netloc not in ("", "localhost"):
			raise ValueError(f"file: locations cannot name a host ({parsed.netloc!r}); use host:path")
		path = parsed.path
		if not path:
			raise ValueError(f"missing local path in {uri!r}")
		return Location(kind=Transport.LOCAL, path=path)
	m = _REMOTE.match(uri)
	if m and "://" not in uri:
		return Location(kind=Transport.REMOTE, path=m.group("path"), host=m.group("host"))
	if allow_bare_path and ":" not in uri:
		return Location(kind=Transport.LOCAL, path=uri)
	raise ValueError(f"unsupported location {uri!r}")
