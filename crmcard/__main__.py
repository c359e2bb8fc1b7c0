"""CLI entry point for vCard import and export.

Usage:
    python -m crmcard import PATH [--recursive] [--json]   # decode .vcf file(s)
    python -m crmcard export CONTACTS.json [-o OUT.vcf]    # encode contacts
    python -m crmcard serve                                # launch web API
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from . import config
from .display import display_drafts, display_import_summary

console = Console()


# ---------------------------------------------------------------------------
# Subcommand: import
# ---------------------------------------------------------------------------

def cmd_import(args: argparse.Namespace) -> None:
    """Decode vCard file(s) and show the drafts for review."""
    from .vcard_import import import_vcards

    try:
        result = import_vcards(args.path, recursive=args.recursive)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]{exc}[/red]")
        sys.exit(1)

    if args.json:
        drafts = [c.to_draft() for c in result.contacts]
        print(json.dumps(drafts, indent=2, ensure_ascii=False))
    else:
        display_drafts(result.contacts)
        display_import_summary(result)
        if not result.contacts and not result.invalid_files:
            console.print("\n[yellow]No contacts found in the given file(s).[/yellow]")

    if result.invalid_files:
        sys.exit(1)


# ---------------------------------------------------------------------------
# Subcommand: export
# ---------------------------------------------------------------------------

def cmd_export(args: argparse.Namespace) -> None:
    """Encode contacts from a JSON file into a .vcf file."""
    from .vcard_export import (
        contacts_from_payload,
        contacts_to_vcard_file,
        export_filename,
        verify_vcard_text,
        write_vcard_file,
    )

    try:
        payload = json.loads(Path(args.input).read_text(encoding="utf-8"))
        contacts, orgs = contacts_from_payload(payload)
    except (OSError, ValueError) as exc:
        console.print(f"[red]Cannot read contacts from {args.input}: {exc}[/red]")
        sys.exit(1)

    content = contacts_to_vcard_file(contacts, orgs.get)

    if args.verify:
        try:
            count = verify_vcard_text(content)
        except ValueError as exc:
            console.print(f"[red]{exc}[/red]")
            sys.exit(1)
        console.print(f"[green]  Verified {count} vCard(s).[/green]")

    output = Path(args.output) if args.output else Path(export_filename())
    try:
        write_vcard_file(content, output)
    except (OSError, ValueError) as exc:
        console.print(f"[red]Cannot write {output}: {exc}[/red]")
        sys.exit(1)
    console.print(f"[green]Exported {len(contacts)} contact(s) to {output}[/green]")


# ---------------------------------------------------------------------------
# Subcommand: serve
# ---------------------------------------------------------------------------

def cmd_serve(args: argparse.Namespace) -> None:
    """Launch the web API."""
    import uvicorn

    from .web.app import create_app

    app = create_app()
    console.print(f"\n[bold]Starting web API at http://{args.host}:{args.port}[/bold]")
    uvicorn.run(app, host=args.host, port=args.port)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m crmcard",
        description="CRM vCard import/export",
    )
    sub = parser.add_subparsers(dest="command")

    # import
    im = sub.add_parser("import", help="Decode contacts from .vcf file(s)")
    im.add_argument("path", help="A .vcf file or a directory of them")
    im.add_argument("--recursive", action="store_true", help="Search subdirectories")
    im.add_argument("--json", action="store_true", help="Print drafts as JSON")

    # export
    ex = sub.add_parser("export", help="Encode contacts from JSON into a .vcf file")
    ex.add_argument("input", help="JSON file with a list of contacts")
    ex.add_argument("-o", "--output", help="Output .vcf path (default: contacts-DATE.vcf)")
    ex.add_argument("--verify", action="store_true",
                    help="Re-read the output with vobject before writing")

    # serve
    sv = sub.add_parser("serve", help="Launch web API")
    sv.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    sv.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")

    return parser


def main(argv: list[str] | None = None) -> None:
    # Set up logging
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )

    parser = build_parser()
    args = parser.parse_args(argv)

    commands = {
        "import": cmd_import,
        "export": cmd_export,
        "serve": cmd_serve,
    }

    if not args.command:
        parser.print_help()
        sys.exit(2)
    commands[args.command](args)


if __name__ == "__main__":
    main()
