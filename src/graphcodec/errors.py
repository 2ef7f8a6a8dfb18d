from __future__ import annotations


class CodecError(Exception):
	"""Base error for graphcodec failures."""


class DecodeError(CodecError):
	"""Raised when encoded text or a path token cannot be interpreted."""

	position: int | None

	def __init__(self, message: str, *, position: int | None = None) -> None:
		if position is not None:
			message = f"{message} (at position {position})"
		super().__init__(message)
		self.position = position


__all__ = ["CodecError", "DecodeError"]
