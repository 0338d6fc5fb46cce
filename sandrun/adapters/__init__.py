"""Transports used to install packages and relay captured output."""

from sandrun.adapters.base import Adapter, parse_location
from sandrun.adapters.content_store import ContentStore
from sandrun.adapters.handlers import ContentStoreAdapter, LocalAdapter, ScpAdapter, get_adapter
from sandrun.adapters.scp import SecureCopy

__all__ = [
	"Adapter",
	"ContentStore",
	"ContentStoreAdapter",
	"LocalAdapter",
	"ScpAdapter",
	"SecureCopy",
	"get_adapter",
	"parse_location",
]
