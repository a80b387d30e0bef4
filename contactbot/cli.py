"""Offline converter -- run the bot's conversions on local files."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from .contacts.models import ContactFormatError
from .contacts.parsers import DEFAULT_PREFIX, parse_upload
from .contacts.writers import number_contacts, split_evenly, write_txt, write_vcf
from .delivery.storage import FileRef

console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="contactbot", description=__doc__)
    sub = parser.add_subparsers(dest="command", required=True)

    convert = sub.add_parser("convert", help="convert a contact file to VCF or TXT")
    convert.add_argument("input", type=Path)
    convert.add_argument("--to", choices=("vcf", "txt"), default="vcf")
    convert.add_argument("--name", help="output file name (default: input stem)")
    convert.add_argument("--prefix", help="rename contacts to '<prefix> 1', '<prefix> 2', ...")
    convert.add_argument("--split", type=int, default=1, help="number of output files")
    convert.add_argument("--out", type=Path, default=Path("."), help="output directory")
    return parser


def convert(args: argparse.Namespace) -> list[FileRef]:
    contacts = parse_upload(args.input.name, args.input.read_bytes(), args.prefix or DEFAULT_PREFIX)
    if args.prefix:
        contacts = number_contacts(contacts, args.prefix)
    name = args.name or args.input.stem
    writer = write_vcf if args.to == "vcf" else write_txt
    args.out.mkdir(parents=True, exist_ok=True)

    if args.split <= 1:
        return [writer(args.out, name, contacts)]
    return [
        writer(args.out, f"{name} {i}", group)
        for i, group in enumerate(split_evenly(contacts, args.split), start=1)
    ]


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.split < 1:
        console.print("[bold red]--split must be at least 1[/bold red]")
        return 2
    try:
        files = convert(args)
    except (ContactFormatError, OSError) as exc:
        console.print(f"[bold red]error:[/bold red] {exc}")
        return 1

    table = Table(title=f"{args.input.name} -> {args.to.upper()}")
    table.add_column("File")
    table.add_column("Contacts", justify="right")
    for ref in files:
        table.add_row(str(ref.path), str(ref.count))
    console.print(table)
    console.print(f"[dim]{sum(f.count or 0 for f in files)} contact(s) in {len(files)} file(s)[/dim]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
