"""
Command-line interface for graphcodec.
Encode JSON documents, decode encoded text and inspect stored session slots.
"""
# typer relies on function calls used as default values
# pyright: reportCallInDefaultInitializer=false

from __future__ import annotations

import json
import sys
from dataclasses import asdict
from pathlib import Path

import typer
from rich.console import Console
from rich.pretty import Pretty
from rich.table import Table

from graphcodec.codec import GraphCodec
from graphcodec.errors import DecodeError
from graphcodec.session import PREFS_KEY, SessionPrefs, SessionVars
from graphcodec.storage import FileSlot
from graphcodec.version import __version__

cli = typer.Typer(
	name="graphcodec",
	help="Encode and decode object graphs with shared and circular references",
	no_args_is_help=True,
)


def _read_input(source: str) -> str:
	if source == "-":
		return sys.stdin.read()
	return Path(source).read_text(encoding="utf-8")


@cli.command("encode")
def encode_cmd(
	source: str = typer.Argument(
		"-", help="JSON file to encode (reads stdin when omitted or '-')"
	),
	compact: bool = typer.Option(
		False, "--compact", help="Separate mapping entries without newlines"
	),
	detect_circular: bool = typer.Option(
		True,
		"--detect-circular/--no-detect-circular",
		help="Write repeated objects as back-references",
	),
):
	"""Encode a JSON document."""
	console = Console(stderr=True)
	try:
		data = json.loads(_read_input(source))
	except (OSError, json.JSONDecodeError) as exc:
		console.log(f"❌ Could not read JSON input: {exc}")
		raise typer.Exit(1) from None
	overrides: dict[str, bool] = {"detect_circular": detect_circular}
	if compact:
		overrides["compact_output"] = True
	codec = GraphCodec.from_env(**overrides)
	typer.echo(codec.encode(data))


@cli.command("decode")
def decode_cmd(
	source: str = typer.Argument(
		"-", help="File holding encoded text (reads stdin when omitted or '-')"
	),
	strict: bool = typer.Option(
		False, "--strict", help="Fail on invalid input instead of printing {}"
	),
	as_json: bool = typer.Option(
		False, "--json", help="Print JSON output (fails on circular data)"
	),
):
	"""Decode encoded text and print the resulting value."""
	console = Console()
	try:
		text = _read_input(source)
	except OSError as exc:
		console.log(f"❌ Could not read input: {exc}")
		raise typer.Exit(1) from None
	try:
		value = GraphCodec.from_env().decode(text.strip(), strict=strict)
	except DecodeError as exc:
		console.log(f"❌ Invalid input: {exc}")
		raise typer.Exit(1) from None
	if as_json:
		try:
			typer.echo(json.dumps(value, indent=2, ensure_ascii=False))
		except (TypeError, ValueError) as exc:
			console.log(f"❌ Cannot print as JSON: {exc}")
			raise typer.Exit(1) from None
		return
	console.print(Pretty(value))


@cli.command("inspect")
def inspect_cmd(
	slot_file: Path = typer.Argument(..., help="File used as a session storage slot"),
	mem_limit: int = typer.Option(
		0, "--mem-limit", help="Memory limit in KB (0 uses the stored prefs)"
	),
):
	"""Show memory usage and content of a session storage slot."""
	console = Console()
	if not slot_file.exists():
		console.log(f"❌ Slot file not found: {slot_file}")
		raise typer.Exit(1)

	slot = FileSlot(slot_file)
	text = slot.read()
	session = SessionVars(slot)
	stored = session.codec.decode(text, session.codec_options())
	if not isinstance(stored, dict):
		stored = {}
	raw_prefs = stored.pop(PREFS_KEY, None)
	if isinstance(raw_prefs, dict):
		prefs = SessionPrefs.from_dict(raw_prefs)
	else:
		prefs = session.prefs
	limit = mem_limit or prefs.mem_limit

	used_kb = round(len(text) / 1024)
	table = Table(title=f"graphcodec {__version__} - {slot_file}")
	table.add_column("Variable")
	table.add_column("Value", overflow="fold")
	for name, value in stored.items():
		table.add_row(name, Pretty(value))
	console.print(table)
	console.print(
		f"Memory usage: {used_kb} KB ({round(100 * used_kb / limit)}% of {limit} KB)"
	)
	if raw_prefs is not None:
		console.print("Preferences:", Pretty(asdict(prefs)))


def main():
	"""Main CLI entry point."""
	try:
		cli()
	except Exception:
		console = Console()
		console.print_exception()
		raise typer.Exit(1) from None


if __name__ == "__main__":
	main()
