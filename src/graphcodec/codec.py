"""Encoding of object graphs, cycles included, to and from text.

Encoded text follows the literal grammar of `graphcodec.literal`, with two
kinds of tagged strings::

    "JSONcircRef:a.b[0]"          the object first seen at path a.b[0]
    "JSONincludedFunc:mod:name"   a callable, when functions are included

A composite reached twice during one encode is written once; every later
visit becomes a back-reference to the path of the first. Tuples and
frozensets are not tracked and are written out at every visit. Decoding parses the
text into plain dicts and lists, then walks that skeleton again to collect
the tagged strings and swaps each one for the object it names.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Final

from graphcodec.errors import DecodeError
from graphcodec.functions import (
	FunctionResolver,
	describe_function,
	resolve_loaded_function,
)
from graphcodec.literal import format_number, looks_like_literal, parse_literal, quote
from graphcodec.options import DEFAULT_OPTIONS, CodecOptions
from graphcodec.paths import Path, PathSegment, PathTracker, format_path, parse_path
from graphcodec.values import ValueKind, classify, iter_entries
from graphcodec.visited import VisitedSet

logger = logging.getLogger(__name__)

CIRC_REF_MARKER: Final = "JSONcircRef:"
FUNCTION_MARKER: Final = "JSONincludedFunc:"

# Immutable sequences may be shared by the interpreter itself (the empty tuple,
# interned constants), so their identity says nothing about the graph.
_UNTRACKED_SEQUENCES = (tuple, frozenset)


class _Undefined:
	__slots__: tuple[str, ...] = ()

	def __repr__(self) -> str:
		return "UNDEFINED"

	def __bool__(self) -> bool:
		return False


UNDEFINED: Final = _Undefined()
"""An absent value: dropped from mappings, written as null in sequences."""


@dataclass(frozen=True, slots=True)
class BackReference:
	"""Make the slot at `target` hold the object found at `source`."""

	target: Path
	source: Path


@dataclass(frozen=True, slots=True)
class FunctionPayload:
	"""Replace the payload string at `target` with the callable it names."""

	target: Path
	reference: str


RestoreInstruction = BackReference | FunctionPayload


class _Traversal:
	"""A single depth-first walk over a value graph.

	In restore mode, tagged strings met along the way are turned into
	instructions instead of being treated as plain content.
	"""

	options: CodecOptions
	out: list[str]
	visited: VisitedSet
	path: PathTracker
	restore: list[RestoreInstruction] | None
	strict: bool

	def __init__(
		self,
		options: CodecOptions,
		*,
		restore: list[RestoreInstruction] | None = None,
		strict: bool = False,
	) -> None:
		self.options = options
		self.out = []
		self.visited = VisitedSet()
		self.path = PathTracker()
		self.restore = restore
		self.strict = strict

	def run(self, value: Any) -> str:
		self._emit(value)
		return "".join(self.out)

	def _emit(self, value: Any) -> bool:
		"""Append the encoding of `value`; False when it produces no output."""
		if value is UNDEFINED:
			return False
		kind = classify(value)
		if kind is ValueKind.PRIMITIVE:
			self._emit_primitive(value)
			return True
		if kind is ValueKind.FUNCTION:
			return self._emit_function(value)
		if kind is ValueKind.EXCLUDED:
			logger.debug(
				"Dropping unrepresentable %s at %r",
				type(value).__name__,
				format_path(self.path.current()),
			)
			return False

		tracked = not isinstance(value, _UNTRACKED_SEQUENCES)
		if self.options.detect_circular and tracked:
			first_path = self.visited.lookup(value)
			if first_path is not None:
				self.out.append(quote(CIRC_REF_MARKER + format_path(first_path)))
				return True
			self.visited.record(value, self.path.current())

		if kind is ValueKind.SEQUENCE:
			self._emit_sequence(value)
		else:
			self._emit_mapping(value)
		return True

	def _emit_primitive(self, value: Any) -> None:
		if value is None:
			self.out.append("null")
		elif value is True:
			self.out.append("true")
		elif value is False:
			self.out.append("false")
		elif isinstance(value, str):
			if self.restore is not None:
				self._collect(value)
			self.out.append(quote(value))
		else:
			self.out.append(format_number(value))

	def _emit_function(self, value: Callable[..., Any]) -> bool:
		if not self.options.include_functions:
			logger.debug(
				"Dropping function %r at %r",
				value,
				format_path(self.path.current()),
			)
			return False
		if inspect.ismethod(value):
			logger.debug(
				"Writing bound method %r at %r without its instance",
				value,
				format_path(self.path.current()),
			)
		self.out.append(quote(FUNCTION_MARKER + describe_function(value)))
		return True

	def _emit_sequence(self, value: Any) -> None:
		out = self.out
		out.append("[")
		for index, item in enumerate(value):
			if index > 0:
				out.append(",\n")
			with self.path.at(index):
				if not self._emit(item):
					out.append("null")
		out.append("]")

	def _emit_mapping(self, value: Any) -> None:
		out = self.out
		separator = "," if self.options.compact_output else ",\n"
		out.append("{")
		first = True
		for key, entry in iter_entries(
			value, include_inherited=self.options.include_inherited
		):
			with self.path.at(key):
				mark = len(out)
				if not first:
					out.append(separator)
				out.append(quote(key))
				out.append(":")
				if self._emit(entry):
					first = False
				else:
					del out[mark:]
		out.append("}")

	def _collect(self, value: str) -> None:
		assert self.restore is not None
		target = self.path.current()
		if value.startswith(CIRC_REF_MARKER):
			token = value[len(CIRC_REF_MARKER) :]
			try:
				source = parse_path(token)
			except DecodeError:
				if self.strict:
					raise
				logger.warning("Ignoring malformed back-reference %r", value)
				return
			self.restore.append(BackReference(target=target, source=source))
		elif self.options.include_functions and value.startswith(FUNCTION_MARKER):
			reference = value[len(FUNCTION_MARKER) :]
			self.restore.append(FunctionPayload(target=target, reference=reference))


def _has_slot(node: Any, segment: PathSegment) -> bool:
	if isinstance(node, list):
		return isinstance(segment, int) and segment < len(node)
	if isinstance(node, dict):
		return isinstance(segment, str) and segment in node
	return False


def _locate(root: Any, path: Path) -> Any:
	node = root
	for segment in path:
		if not _has_slot(node, segment):
			raise DecodeError(
				f"Path {format_path(path)!r} does not exist in decoded data"
			)
		node = node[segment]
	return node


def _assign(root: Any, path: Path, value: Any) -> None:
	if not path:
		raise DecodeError("Cannot replace the root of decoded data")
	parent = _locate(root, path[:-1])
	key = path[-1]
	if not _has_slot(parent, key):
		raise DecodeError(f"Path {format_path(path)!r} does not exist in decoded data")
	parent[key] = value


class GraphCodec:
	"""Encoder/decoder for value graphs with shared and circular references."""

	options: CodecOptions
	function_resolver: FunctionResolver

	def __init__(
		self,
		options: CodecOptions | None = None,
		*,
		function_resolver: FunctionResolver | None = None,
	) -> None:
		self.options = options or DEFAULT_OPTIONS
		self.function_resolver = function_resolver or resolve_loaded_function

	@classmethod
	def from_env(cls, **overrides: Any) -> GraphCodec:
		return cls(CodecOptions.from_env(**overrides))

	def _resolve_options(
		self, options: CodecOptions | None, overrides: dict[str, Any]
	) -> CodecOptions:
		opts = options or self.options
		if overrides:
			opts = opts.replace(**overrides)
		return opts

	def encode(
		self, value: Any, options: CodecOptions | None = None, **overrides: Any
	) -> str:
		"""Serialize `value` to text. Never fails on size."""
		opts = self._resolve_options(options, overrides)
		return _Traversal(opts).run(value)

	def decode(
		self,
		text: str,
		options: CodecOptions | None = None,
		*,
		strict: bool = False,
		**overrides: Any,
	) -> Any:
		"""Rebuild the value graph encoded in `text`.

		Text that fails validation or parsing, or is nested deeper than the
		recursion limit allows, yields an empty dict. With `strict` set,
		`DecodeError` is raised instead.
		"""
		opts = self._resolve_options(options, overrides)
		if not isinstance(text, str) or not looks_like_literal(text):
			if strict:
				raise DecodeError("Input does not look like encoded literal data")
			logger.warning("Refusing to decode input that does not look like literal data")
			return {}
		try:
			skeleton = parse_literal(text)
			if not opts.restore_circular:
				return skeleton
			return self.restore(skeleton, opts, strict=strict)
		except DecodeError as exc:
			if strict:
				raise
			logger.warning("Discarding undecodable input: %s", exc)
			return {}
		except RecursionError:
			if strict:
				raise DecodeError("Input is nested too deeply to decode") from None
			logger.warning("Discarding input nested too deeply to decode")
			return {}

	def collect(
		self, skeleton: Any, options: CodecOptions | None = None, *, strict: bool = False
	) -> list[RestoreInstruction]:
		"""Walk a decoded skeleton and list the restorations it needs."""
		instructions: list[RestoreInstruction] = []
		_Traversal(options or self.options, restore=instructions, strict=strict).run(
			skeleton
		)
		return instructions

	def restore(
		self, skeleton: Any, options: CodecOptions | None = None, *, strict: bool = False
	) -> Any:
		"""Apply back-references and function payloads to a decoded skeleton."""
		for instruction in self.collect(skeleton, options, strict=strict):
			try:
				self._apply(skeleton, instruction)
			except DecodeError as exc:
				if strict:
					raise
				logger.warning("Skipping %r: %s", instruction, exc)
		return skeleton

	def _apply(self, root: Any, instruction: RestoreInstruction) -> None:
		if isinstance(instruction, BackReference):
			_assign(root, instruction.target, _locate(root, instruction.source))
			return
		fn = self.function_resolver(instruction.reference)
		if fn is None:
			raise DecodeError(f"Cannot resolve function {instruction.reference!r}")
		_assign(root, instruction.target, fn)


_default_codec = GraphCodec()


def encode(value: Any, options: CodecOptions | None = None, **overrides: Any) -> str:
	return _default_codec.encode(value, options, **overrides)


def decode(
	text: str,
	options: CodecOptions | None = None,
	*,
	strict: bool = False,
	**overrides: Any,
) -> Any:
	return _default_codec.decode(text, options, strict=strict, **overrides)


dumps = encode
loads = decode

__all__ = [
	"BackReference",
	"CIRC_REF_MARKER",
	"FUNCTION_MARKER",
	"FunctionPayload",
	"GraphCodec",
	"RestoreInstruction",
	"UNDEFINED",
	"decode",
	"dumps",
	"encode",
	"loads",
]
