from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class StorageSlot(Protocol):
	"""A single persisted string that survives between sessions."""

	def read(self) -> str: ...
	def write(self, text: str) -> bool: ...


class InMemorySlot:
	def __init__(self, text: str = "") -> None:
		self.text = text

	def read(self) -> str:
		return self.text

	def write(self, text: str) -> bool:
		self.text = text
		return True


class FileSlot:
	"""Slot backed by a UTF-8 text file. A missing file reads as empty."""

	def __init__(self, path: Path | str) -> None:
		self.path = Path(path)

	def read(self) -> str:
		try:
			return self.path.read_text(encoding="utf-8")
		except FileNotFoundError:
			return ""

	def write(self, text: str) -> bool:
		try:
			self.path.parent.mkdir(parents=True, exist_ok=True)
			self.path.write_text(text, encoding="utf-8")
		except OSError:
			logger.exception("Could not write storage slot %s", self.path)
			return False
		return True


__all__ = ["FileSlot", "InMemorySlot", "StorageSlot"]
