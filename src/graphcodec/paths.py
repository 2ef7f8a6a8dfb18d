from __future__ import annotations

import re
from collections.abc import Iterator
from contextlib import contextmanager

from graphcodec.errors import DecodeError
from graphcodec.literal import LiteralParser, quote

PathSegment = str | int
Path = tuple[PathSegment, ...]

ROOT: Path = ()

# Keys that can be written after a dot without quoting
_BARE_KEY = re.compile(r'[^.\[\]"\\]+')
_INDEX = re.compile(r"\[(0|[1-9][0-9]*)\]")


class PathTracker:
	"""Current location of a depth-first traversal, as a stack of segments."""

	__slots__: tuple[str, ...] = ("_segments",)
	_segments: list[PathSegment]

	def __init__(self) -> None:
		self._segments = []

	def push(self, segment: PathSegment) -> None:
		self._segments.append(segment)

	def pop(self) -> PathSegment:
		return self._segments.pop()

	def current(self) -> Path:
		return tuple(self._segments)

	@contextmanager
	def at(self, segment: PathSegment) -> Iterator[None]:
		self.push(segment)
		try:
			yield
		finally:
			self.pop()

	def __len__(self) -> int:
		return len(self._segments)


def format_path(path: Path) -> str:
	"""Render a path as `a.b[0].c`; the root is the empty string.

	Keys that contain separators, quotes or backslashes (and the empty key)
	are written in bracket-quoted form: `a["x.y"]`.
	"""
	parts: list[str] = []
	for segment in path:
		if isinstance(segment, int):
			parts.append(f"[{segment}]")
		elif _BARE_KEY.fullmatch(segment):
			parts.append(f".{segment}" if parts else segment)
		else:
			parts.append(f"[{quote(segment)}]")
	return "".join(parts)


def parse_path(text: str) -> Path:
	"""Inverse of `format_path`."""
	segments: list[PathSegment] = []
	i = 0
	n = len(text)
	while i < n:
		ch = text[i]
		if ch == "[":
			if text.startswith('["', i):
				parser = LiteralParser(text)
				parser.pos = i + 1
				key = parser.parse_string()
				i = parser.pos
				if not text.startswith("]", i):
					raise DecodeError(f"Unclosed key in path {text!r}", position=i)
				segments.append(key)
				i += 1
				continue
			match = _INDEX.match(text, i)
			if match is None:
				raise DecodeError(f"Invalid index in path {text!r}", position=i)
			segments.append(int(match.group(1)))
			i = match.end()
			continue
		if ch == ".":
			if not segments:
				raise DecodeError(f"Path {text!r} starts with a separator", position=i)
			i += 1
		elif segments:
			raise DecodeError(f"Missing separator in path {text!r}", position=i)
		match = _BARE_KEY.match(text, i)
		if match is None:
			raise DecodeError(f"Empty key in path {text!r}", position=i)
		segments.append(match.group(0))
		i = match.end()
	return tuple(segments)


__all__ = [
	"Path",
	"PathSegment",
	"PathTracker",
	"ROOT",
	"format_path",
	"parse_path",
]
