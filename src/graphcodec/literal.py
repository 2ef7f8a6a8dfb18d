"""Textual literal grammar shared by the encoder and the decoder.

The grammar is a JSON subset::

    value   := object | array | string | number | "true" | "false" | "null"
    object  := "{" [ pair ( "," pair )* ] "}"
    array   := "[" [ value ( "," value )* ] "]"
    pair    := string ":" value

Whitespace (space, tab, newline, carriage return) may appear between tokens.
Input is only ever interpreted structurally, never evaluated.
"""

from __future__ import annotations

import math
import re
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Final

from graphcodec.errors import DecodeError

_ESCAPES = {
	"\\": "\\\\",
	'"': '\\"',
	"\n": "\\n",
	"\r": "\\r",
	"\t": "\\t",
	"\b": "\\b",
	"\f": "\\f",
	"\u2028": "\\u2028",
	"\u2029": "\\u2029",
}

_UNESCAPES = {
	'"': '"',
	"\\": "\\",
	"/": "/",
	"b": "\b",
	"f": "\f",
	"n": "\n",
	"r": "\r",
	"t": "\t",
	"v": "\v",
}

_NEEDS_ESCAPE = re.compile(r'[\\"\x00-\x1f\u2028\u2029]')

# Quoted strings, or the characters literal data can contain outside of them.
_LITERAL_SHAPE = re.compile(
	r'(?:"(?:\\.|[^"\\\n\r])*"|[,:{}\[\]0-9.\-+Eaeflnr-u \n\r\t])+', re.DOTALL
)

_NUMBER = re.compile(r"-?(?:0|[1-9][0-9]*)(\.[0-9]+)?([eE][+-]?[0-9]+)?")

MAX_DECODED_INT_DIGITS: Final = 100_000
"""Longest integer literal the parser converts; longer ones are rejected."""

_WHITESPACE = " \t\n\r"


def _escape_char(match: re.Match[str]) -> str:
	ch = match.group(0)
	escaped = _ESCAPES.get(ch)
	if escaped is not None:
		return escaped
	return f"\\u{ord(ch):04x}"


def quote(value: str) -> str:
	"""Return `value` as a double-quoted string literal."""
	return f'"{_NEEDS_ESCAPE.sub(_escape_char, value)}"'


@contextmanager
def int_digit_limit(limit: int) -> Iterator[None]:
	"""Temporarily change the interpreter's int/str conversion limit (0 disables it)."""
	previous = sys.get_int_max_str_digits()
	sys.set_int_max_str_digits(limit)
	try:
		yield
	finally:
		sys.set_int_max_str_digits(previous)


def format_number(value: int | float) -> str:
	if isinstance(value, float):
		if not math.isfinite(value):
			return "null"
		return float.__repr__(value)
	try:
		return str(int(value))
	except ValueError:
		with int_digit_limit(0):
			return str(int(value))


def looks_like_literal(text: str) -> bool:
	"""Cheap pre-check that `text` only contains literal-data characters.

	This is permissive: passing it does not mean the text parses.
	"""
	return _LITERAL_SHAPE.fullmatch(text) is not None


class LiteralParser:
	"""Recursive-descent parser for the literal grammar."""

	text: str
	pos: int

	def __init__(self, text: str) -> None:
		self.text = text
		self.pos = 0

	def parse(self) -> Any:
		self._skip_ws()
		value = self._value()
		self._skip_ws()
		if self.pos != len(self.text):
			raise DecodeError("Unexpected trailing data", position=self.pos)
		return value

	def parse_string(self) -> str:
		"""Parse a single string literal starting at the current position."""
		return self._string()

	def _error(self, message: str) -> DecodeError:
		return DecodeError(message, position=self.pos)

	def _peek(self) -> str:
		if self.pos >= len(self.text):
			raise self._error("Unexpected end of input")
		return self.text[self.pos]

	def _skip_ws(self) -> None:
		text = self.text
		n = len(text)
		while self.pos < n and text[self.pos] in _WHITESPACE:
			self.pos += 1

	def _expect(self, ch: str) -> None:
		if self._peek() != ch:
			raise self._error(f"Expected {ch!r}, found {self.text[self.pos]!r}")
		self.pos += 1

	def _value(self) -> Any:
		ch = self._peek()
		if ch == "{":
			return self._object()
		if ch == "[":
			return self._array()
		if ch == '"':
			return self._string()
		if ch == "-" or ch.isdigit():
			return self._number()
		for word, result in (("true", True), ("false", False), ("null", None)):
			if self.text.startswith(word, self.pos):
				self.pos += len(word)
				return result
		raise self._error(f"Unexpected character {ch!r}")

	def _object(self) -> dict[str, Any]:
		self._expect("{")
		result: dict[str, Any] = {}
		self._skip_ws()
		if self._peek() == "}":
			self.pos += 1
			return result
		while True:
			self._skip_ws()
			if self._peek() != '"':
				raise self._error("Expected a string key")
			key = self._string()
			self._skip_ws()
			self._expect(":")
			self._skip_ws()
			result[key] = self._value()
			self._skip_ws()
			ch = self._peek()
			self.pos += 1
			if ch == "}":
				return result
			if ch != ",":
				self.pos -= 1
				raise self._error(f"Expected ',' or '}}', found {ch!r}")

	def _array(self) -> list[Any]:
		self._expect("[")
		result: list[Any] = []
		self._skip_ws()
		if self._peek() == "]":
			self.pos += 1
			return result
		while True:
			self._skip_ws()
			result.append(self._value())
			self._skip_ws()
			ch = self._peek()
			self.pos += 1
			if ch == "]":
				return result
			if ch != ",":
				self.pos -= 1
				raise self._error(f"Expected ',' or ']', found {ch!r}")

	def _string(self) -> str:
		self._expect('"')
		text = self.text
		n = len(text)
		parts: list[str] = []
		start = self.pos
		while True:
			if self.pos >= n:
				raise DecodeError("Unterminated string", position=start - 1)
			ch = text[self.pos]
			if ch == '"':
				parts.append(text[start : self.pos])
				self.pos += 1
				return "".join(parts)
			if ch in "\n\r":
				raise self._error("Raw line break inside string")
			if ch == "\\":
				parts.append(text[start : self.pos])
				self.pos += 1
				parts.append(self._escape())
				start = self.pos
				continue
			self.pos += 1

	def _escape(self) -> str:
		ch = self._peek()
		self.pos += 1
		simple = _UNESCAPES.get(ch)
		if simple is not None:
			return simple
		if ch == "u":
			digits = self.text[self.pos : self.pos + 4]
			if len(digits) != 4 or not all(c in "0123456789abcdefABCDEF" for c in digits):
				raise self._error("Invalid \\u escape")
			self.pos += 4
			code = int(digits, 16)
			# Surrogate pair
			if 0xD800 <= code < 0xDC00 and self.text.startswith("\\u", self.pos):
				low_digits = self.text[self.pos + 2 : self.pos + 6]
				if len(low_digits) == 4 and all(
					c in "0123456789abcdefABCDEF" for c in low_digits
				):
					low = int(low_digits, 16)
					if 0xDC00 <= low < 0xE000:
						self.pos += 6
						return chr(0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00))
			return chr(code)
		raise DecodeError(f"Invalid escape '\\{ch}'", position=self.pos - 2)

	def _number(self) -> int | float:
		match = _NUMBER.match(self.text, self.pos)
		if match is None:
			raise self._error("Invalid number")
		self.pos = match.end()
		literal = match.group(0)
		if match.group(1) is None and match.group(2) is None:
			return self._integer(literal, match.start())
		return float(literal)

	def _integer(self, literal: str, start: int) -> int:
		try:
			return int(literal)
		except ValueError:
			pass
		try:
			with int_digit_limit(MAX_DECODED_INT_DIGITS):
				return int(literal)
		except ValueError:
			digits = len(literal.lstrip("-"))
			raise DecodeError(
				f"Integer literal too long ({digits} digits)", position=start
			) from None


def parse_literal(text: str) -> Any:
	return LiteralParser(text).parse()


__all__ = [
	"LiteralParser",
	"MAX_DECODED_INT_DIGITS",
	"format_number",
	"int_digit_limit",
	"looks_like_literal",
	"parse_literal",
	"quote",
]
