from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

from graphcodec.env import env


@dataclass(frozen=True, slots=True)
class CodecOptions:
	"""Switches controlling how a graph is encoded and restored.

	- include_inherited: emit entries a mapping only inherits from its base.
	- include_functions: emit callables as tagged payload strings, and resolve
	  those payloads back to callables when decoding. Bound methods are
  written as their underlying function; the instance is not kept.
	- detect_circular: track composite identities and emit back-references
	  for repeated visits. Without it a cyclic graph recurses until Python's
	  recursion limit is hit.
	- restore_circular: run the back-reference restoration pass on decode.
	- compact_output: separate mapping entries with "," instead of ",\\n".
	"""

	include_inherited: bool = False
	include_functions: bool = False
	detect_circular: bool = True
	restore_circular: bool = True
	compact_output: bool = False

	@classmethod
	def from_env(cls, **overrides: Any) -> CodecOptions:
		values: dict[str, Any] = {
			"include_inherited": env.include_inherited,
			"include_functions": env.include_functions,
			"detect_circular": env.detect_circular,
			"restore_circular": env.restore_circular,
			"compact_output": env.compact_output,
		}
		values.update(overrides)
		return cls(**values)

	def replace(self, **changes: Any) -> CodecOptions:
		return dataclasses.replace(self, **changes)


DEFAULT_OPTIONS = CodecOptions()

__all__ = ["CodecOptions", "DEFAULT_OPTIONS"]
