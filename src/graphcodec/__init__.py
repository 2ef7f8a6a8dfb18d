"""graphcodec - text encoding for object graphs with shared and circular references."""

from graphcodec.codec import (
	CIRC_REF_MARKER,
	FUNCTION_MARKER,
	UNDEFINED,
	BackReference,
	FunctionPayload,
	GraphCodec,
	RestoreInstruction,
	decode,
	dumps,
	encode,
	loads,
)
from graphcodec.env import env
from graphcodec.errors import CodecError, DecodeError
from graphcodec.options import CodecOptions
from graphcodec.paths import Path, PathTracker, format_path, parse_path
from graphcodec.session import SessionPrefs, SessionVars, registrable_domain, within_budget
from graphcodec.storage import FileSlot, InMemorySlot, StorageSlot
from graphcodec.values import Record, ValueKind, classify, is_inherited
from graphcodec.version import __version__
from graphcodec.visited import VisitedSet

__all__ = [
	"BackReference",
	"CIRC_REF_MARKER",
	"CodecError",
	"CodecOptions",
	"DecodeError",
	"FUNCTION_MARKER",
	"FileSlot",
	"FunctionPayload",
	"GraphCodec",
	"InMemorySlot",
	"Path",
	"PathTracker",
	"Record",
	"RestoreInstruction",
	"SessionPrefs",
	"SessionVars",
	"StorageSlot",
	"UNDEFINED",
	"ValueKind",
	"VisitedSet",
	"__version__",
	"classify",
	"decode",
	"dumps",
	"encode",
	"env",
	"format_path",
	"is_inherited",
	"loads",
	"parse_path",
	"registrable_domain",
	"within_budget",
]
