"""Session variables persisted as one encoded string in a storage slot.

A `SessionVars` object is a mutable mapping. Its content, together with its
preferences, is encoded with a `GraphCodec` and written to a `StorageSlot`
on `flush()`. Data written under a different scope (site) is ignored on
`load()` unless cross-scope sharing is enabled.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass, field, fields
from types import TracebackType
from typing import Any
from urllib.parse import urlsplit

from graphcodec.codec import GraphCodec
from graphcodec.env import env
from graphcodec.options import CodecOptions
from graphcodec.storage import StorageSlot

logger = logging.getLogger(__name__)

PREFS_KEY = "$"


def _default_mem_limit() -> int:
	return env.mem_limit


@dataclass(slots=True)
class SessionPrefs:
	mem_limit: int = field(default_factory=_default_mem_limit)
	auto_flush: bool = True
	cross_scope: bool = False
	include_inherited: bool = False
	include_functions: bool = False
	current_scope: str | None = None

	@classmethod
	def from_dict(cls, data: Mapping[str, Any]) -> SessionPrefs:
		"""Rebuild prefs from decoded data, ignoring unknown or mistyped entries."""
		prefs = cls()
		for f in fields(cls):
			if f.name not in data:
				continue
			value = data[f.name]
			if f.name == "mem_limit":
				if isinstance(value, int) and not isinstance(value, bool) and value > 0:
					prefs.mem_limit = value
			elif f.name == "current_scope":
				if value is None or isinstance(value, str):
					prefs.current_scope = value
			elif isinstance(value, bool):
				setattr(prefs, f.name, value)
		return prefs


def within_budget(text: str, limit_kb: int | float) -> bool:
	return len(text) / 1024 <= limit_kb


def registrable_domain(url: str) -> str:
	"""Reduce a URL to its last two host labels: `a.b.example.com` -> `example.com`."""
	url = url.replace("///", "//")
	if "://" not in url:
		url = f"//{url}"
	host = urlsplit(url).hostname or ""
	labels = host.split(".")
	return ".".join(labels[-2:])


class SessionVars(MutableMapping[str, Any]):
	slot: StorageSlot
	scope: str | None
	codec: GraphCodec
	prefs: SessionPrefs
	_vars: dict[str, Any]

	def __init__(
		self,
		slot: StorageSlot,
		*,
		scope: str | None = None,
		codec: GraphCodec | None = None,
		prefs: SessionPrefs | None = None,
	) -> None:
		self.slot = slot
		self.scope = scope
		self.codec = codec or GraphCodec()
		self.prefs = prefs or SessionPrefs()
		self._vars = {}

	@classmethod
	def for_url(cls, slot: StorageSlot, url: str, **kwargs: Any) -> SessionVars:
		return cls(slot, scope=registrable_domain(url), **kwargs)

	# Mapping interface
	def __getitem__(self, key: str) -> Any:
		return self._vars[key]

	def __setitem__(self, key: str, value: Any) -> None:
		if key == PREFS_KEY:
			raise KeyError(f"{PREFS_KEY!r} is reserved for session preferences")
		self._vars[key] = value

	def __delitem__(self, key: str) -> None:
		del self._vars[key]

	def __iter__(self) -> Iterator[str]:
		return iter(self._vars)

	def __len__(self) -> int:
		return len(self._vars)

	def __repr__(self) -> str:
		return f"SessionVars({self._vars!r}, scope={self.scope!r})"

	def codec_options(self) -> CodecOptions:
		return self.codec.options.replace(
			include_inherited=self.prefs.include_inherited,
			include_functions=self.prefs.include_functions,
		)

	def load(self) -> SessionVars:
		"""Read stored variables from the slot, then write the slot back."""
		stored = self.codec.decode(self.slot.read(), self.codec_options())
		if not isinstance(stored, dict):
			logger.warning(
				"Ignoring stored session data of type %s", type(stored).__name__
			)
			stored = {}
		raw_prefs = stored.pop(PREFS_KEY, None)
		if isinstance(raw_prefs, Mapping):
			self.prefs = SessionPrefs.from_dict(raw_prefs)

		if self.prefs.cross_scope or self.prefs.current_scope == self.scope:
			self._vars.update(stored)
		else:
			if stored:
				logger.info(
					"Discarding %d session variables stored for scope %r",
					len(stored),
					self.prefs.current_scope,
				)
			self.prefs.current_scope = self.scope
		self.flush()
		return self

	def encode(self) -> str:
		payload: dict[str, Any] = dict(self._vars)
		payload[PREFS_KEY] = self.prefs
		return self.codec.encode(payload, self.codec_options())

	def flush(self) -> bool:
		"""Persist the variables. Returns False when over the memory limit."""
		text = self.encode()
		if not within_budget(text, self.prefs.mem_limit):
			logger.warning(
				"Session data needs %d KB, over the %d KB limit; not persisted",
				round(len(text) / 1024),
				self.prefs.mem_limit,
			)
			return False
		return self.slot.write(text)

	def used_mem(self) -> int:
		"""Size of the encoded session in kilobytes."""
		return round(len(self.encode()) / 1024)

	def used_mem_percent(self) -> int:
		return round(100 * self.used_mem() / self.prefs.mem_limit)

	def clear(self) -> None:
		self._vars.clear()
		self.flush()

	def __enter__(self) -> SessionVars:
		return self.load()

	def __exit__(
		self,
		exc_type: type[BaseException] | None,
		exc: BaseException | None,
		tb: TracebackType | None,
	) -> None:
		if self.prefs.auto_flush:
			self.flush()


__all__ = [
	"PREFS_KEY",
	"SessionPrefs",
	"SessionVars",
	"registrable_domain",
	"within_budget",
]
