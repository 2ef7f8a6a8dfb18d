from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

FunctionResolver = Callable[[str], Callable[..., Any] | None]


def describe_function(fn: Callable[..., Any]) -> str:
	"""Textual form of a callable: `module:qualified.name`."""
	target = getattr(fn, "__func__", fn)
	module = getattr(target, "__module__", None) or "builtins"
	qualname = (
		getattr(target, "__qualname__", None)
		or getattr(target, "__name__", None)
		or type(target).__qualname__
	)
	return f"{module}:{qualname}"


def resolve_loaded_function(reference: str) -> Callable[..., Any] | None:
	"""Look up a `module:qualname` reference among already imported modules.

	Never imports anything. Returns None for local functions, lambdas and
	references to modules that are not loaded.
	"""
	module_name, sep, qualname = reference.partition(":")
	if not sep or not module_name or not qualname:
		return None
	if "<" in qualname:
		return None
	module = sys.modules.get(module_name)
	if module is None:
		logger.debug("Module %s is not loaded, cannot resolve %s", module_name, reference)
		return None
	obj: Any = module
	for part in qualname.split("."):
		obj = getattr(obj, part, None)
		if obj is None:
			return None
	if not callable(obj):
		return None
	return obj


__all__ = ["FunctionResolver", "describe_function", "resolve_loaded_function"]
