from __future__ import annotations

from typing import Any

from graphcodec.paths import Path


class VisitedSet:
	"""Identity-keyed record of the composites seen during one traversal.

	Each entry keeps the object alive alongside the path where it was first
	reached, so `id()` values cannot be reused while the set exists.
	"""

	__slots__: tuple[str, ...] = ("_seen",)
	_seen: dict[int, tuple[Any, Path]]

	def __init__(self) -> None:
		self._seen = {}

	def lookup(self, obj: Any) -> Path | None:
		entry = self._seen.get(id(obj))
		if entry is None:
			return None
		return entry[1]

	def record(self, obj: Any, path: Path) -> None:
		self._seen.setdefault(id(obj), (obj, path))

	def __contains__(self, obj: object) -> bool:
		return id(obj) in self._seen

	def __len__(self) -> int:
		return len(self._seen)


__all__ = ["VisitedSet"]
