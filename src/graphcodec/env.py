from __future__ import annotations

import os

ENV_GRAPHCODEC_INCLUDE_INHERITED = "GRAPHCODEC_INCLUDE_INHERITED"
ENV_GRAPHCODEC_INCLUDE_FUNCTIONS = "GRAPHCODEC_INCLUDE_FUNCTIONS"
ENV_GRAPHCODEC_DETECT_CIRCULAR = "GRAPHCODEC_DETECT_CIRCULAR"
ENV_GRAPHCODEC_RESTORE_CIRCULAR = "GRAPHCODEC_RESTORE_CIRCULAR"
ENV_GRAPHCODEC_COMPACT = "GRAPHCODEC_COMPACT"
ENV_GRAPHCODEC_MEM_LIMIT = "GRAPHCODEC_MEM_LIMIT"

DEFAULT_MEM_LIMIT_KB = 2000

_FALSY = {"0", "false", "False", "no", "off", ""}


def _flag(name: str, default: bool) -> bool:
	value = os.environ.get(name)
	if value is None:
		return default
	return value.strip() not in _FALSY


def _set_flag(name: str, value: bool | None) -> None:
	if value is None:
		os.environ.pop(name, None)
	else:
		os.environ[name] = "1" if value else "0"


class CodecEnv:
	"""Typed view over the GRAPHCODEC_* environment variables."""

	@property
	def include_inherited(self) -> bool:
		return _flag(ENV_GRAPHCODEC_INCLUDE_INHERITED, False)

	@include_inherited.setter
	def include_inherited(self, value: bool | None) -> None:
		_set_flag(ENV_GRAPHCODEC_INCLUDE_INHERITED, value)

	@property
	def include_functions(self) -> bool:
		return _flag(ENV_GRAPHCODEC_INCLUDE_FUNCTIONS, False)

	@include_functions.setter
	def include_functions(self, value: bool | None) -> None:
		_set_flag(ENV_GRAPHCODEC_INCLUDE_FUNCTIONS, value)

	@property
	def detect_circular(self) -> bool:
		return _flag(ENV_GRAPHCODEC_DETECT_CIRCULAR, True)

	@detect_circular.setter
	def detect_circular(self, value: bool | None) -> None:
		_set_flag(ENV_GRAPHCODEC_DETECT_CIRCULAR, value)

	@property
	def restore_circular(self) -> bool:
		return _flag(ENV_GRAPHCODEC_RESTORE_CIRCULAR, True)

	@restore_circular.setter
	def restore_circular(self, value: bool | None) -> None:
		_set_flag(ENV_GRAPHCODEC_RESTORE_CIRCULAR, value)

	@property
	def compact_output(self) -> bool:
		return _flag(ENV_GRAPHCODEC_COMPACT, False)

	@compact_output.setter
	def compact_output(self, value: bool | None) -> None:
		_set_flag(ENV_GRAPHCODEC_COMPACT, value)

	@property
	def mem_limit(self) -> int:
		raw = os.environ.get(ENV_GRAPHCODEC_MEM_LIMIT)
		if not raw:
			return DEFAULT_MEM_LIMIT_KB
		try:
			limit = int(raw)
		except ValueError:
			raise ValueError(
				f"{ENV_GRAPHCODEC_MEM_LIMIT} must be an integer number of kilobytes, got {raw!r}"
			) from None
		if limit <= 0:
			raise ValueError(f"{ENV_GRAPHCODEC_MEM_LIMIT} must be positive, got {limit}")
		return limit

	@mem_limit.setter
	def mem_limit(self, value: int | None) -> None:
		if value is None:
			os.environ.pop(ENV_GRAPHCODEC_MEM_LIMIT, None)
		else:
			os.environ[ENV_GRAPHCODEC_MEM_LIMIT] = str(value)


env = CodecEnv()

__all__ = [
	"CodecEnv",
	"DEFAULT_MEM_LIMIT_KB",
	"ENV_GRAPHCODEC_COMPACT",
	"ENV_GRAPHCODEC_DETECT_CIRCULAR",
	"ENV_GRAPHCODEC_INCLUDE_FUNCTIONS",
	"ENV_GRAPHCODEC_INCLUDE_INHERITED",
	"ENV_GRAPHCODEC_MEM_LIMIT",
	"ENV_GRAPHCODEC_RESTORE_CIRCULAR",
	"env",
]
