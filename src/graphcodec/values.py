"""Classification of the Python values a graph can contain.

Every value falls in one `ValueKind`. Mappings may carry a *base*: a mapping
of defaults they inherit from, the way instances inherit class attributes.
Entries whose value is the inherited one are filtered out on request.
"""

from __future__ import annotations

import types
from collections.abc import Iterator, Mapping
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any


class ValueKind(Enum):
	PRIMITIVE = "primitive"
	SEQUENCE = "sequence"
	MAPPING = "mapping"
	FUNCTION = "function"
	EXCLUDED = "excluded"


PRIMITIVES = (type(None), bool, int, float, str)
SEQUENCES = (list, tuple, set, frozenset)


class Record(dict[str, Any]):
	"""A dict of own properties backed by an optional `base` mapping.

	Lookups of missing keys fall through to the base. Iterating with
	`iter_entries` yields own entries first, then base entries that are not
	overridden.
	"""

	base: Mapping[str, Any] | None

	def __init__(
		self,
		own: Mapping[str, Any] | None = None,
		*,
		base: Mapping[str, Any] | None = None,
	) -> None:
		super().__init__(own or {})
		self.base = base

	def __missing__(self, key: str) -> Any:
		if self.base is not None and key in self.base:
			return self.base[key]
		raise KeyError(key)

	def inherited_keys(self) -> list[str]:
		if self.base is None:
			return []
		return [key for key in self.base if key not in self]

	def __repr__(self) -> str:
		return f"Record({dict.__repr__(self)}, base={self.base!r})"


def classify(value: Any) -> ValueKind:
	if isinstance(value, PRIMITIVES):
		return ValueKind.PRIMITIVE
	if isinstance(value, Mapping):
		return ValueKind.MAPPING
	if isinstance(value, SEQUENCES):
		return ValueKind.SEQUENCE
	if is_dataclass(value) and not isinstance(value, type):
		return ValueKind.MAPPING
	if isinstance(value, types.ModuleType):
		return ValueKind.EXCLUDED
	if callable(value):
		return ValueKind.FUNCTION
	if hasattr(value, "__dict__"):
		return ValueKind.MAPPING
	return ValueKind.EXCLUDED


def strict_equal(a: Any, b: Any) -> bool:
	"""Identity for composites, type and value equality for primitives."""
	if a is b:
		return True
	if isinstance(a, PRIMITIVES) and isinstance(b, PRIMITIVES):
		return type(a) is type(b) and a == b
	return False


def is_inherited(key: str, value: Any, base: Mapping[str, Any] | None) -> bool:
	"""Whether `value` at `key` is the one `base` provides.

	An own entry that holds exactly the base's value counts as inherited too:
	the comparison is on values, not on key presence.
	"""
	if base is None or key not in base:
		return False
	return strict_equal(value, base[key])


def class_attributes(cls: type) -> dict[str, Any]:
	"""Public class-level attributes along the MRO, most derived last wins."""
	attrs: dict[str, Any] = {}
	for klass in reversed(cls.__mro__):
		if klass is object:
			continue
		for name, attr in vars(klass).items():
			if name.startswith("_"):
				continue
			if isinstance(attr, (staticmethod, classmethod)):
				attr = attr.__func__
			attrs[name] = attr
	return attrs


def own_and_base(value: Any) -> tuple[Mapping[str, Any], Mapping[str, Any] | None]:
	"""Split a MAPPING value into its own entries and its base."""
	if isinstance(value, Record):
		return value, value.base
	if isinstance(value, Mapping):
		return value, None
	if is_dataclass(value):
		return {f.name: getattr(value, f.name) for f in fields(value)}, None
	own = {k: v for k, v in vars(value).items() if not k.startswith("_")}
	return own, class_attributes(type(value))


def iter_entries(
	value: Any, *, include_inherited: bool = False
) -> Iterator[tuple[str, Any]]:
	"""Yield `(key, value)` pairs of a MAPPING value, own entries first."""
	own, base = own_and_base(value)
	for key, entry in own.items():
		key = str(key)
		if not include_inherited and is_inherited(key, entry, base):
			continue
		yield key, entry
	if base is None or not include_inherited:
		return
	for key, entry in base.items():
		if key in own:
			continue
		yield key, entry


__all__ = [
	"PRIMITIVES",
	"Record",
	"SEQUENCES",
	"ValueKind",
	"class_attributes",
	"classify",
	"is_inherited",
	"iter_entries",
	"own_and_base",
	"strict_equal",
]
