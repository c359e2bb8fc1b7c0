"""Rich terminal output for vCard import and export."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.table import Table

from .models import ContactRecord
from .vcard_import import ImportResult

console = Console()


def _first_of(*values: str | None) -> str:
    for value in values:
        if value:
            return value
    return ""


def _location(contact: ContactRecord) -> str:
    return ", ".join(p for p in (contact.city, contact.state) if p)


def display_drafts(contacts: list[ContactRecord]) -> None:
    """Show decoded drafts in a review table."""
    if not contacts:
        return

    table = Table(title=f"{len(contacts)} contact(s)", show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Title")
    table.add_column("Organization")
    table.add_column("Email")
    table.add_column("Phone")
    table.add_column("Location")

    for i, contact in enumerate(contacts, 1):
        table.add_row(
            str(i),
            contact.display_name or "[dim](no name)[/dim]",
            contact.title or "",
            contact.org_name or "",
            _first_of(contact.email_work, contact.email_personal),
            _first_of(contact.phone_mobile, contact.phone_office, contact.phone_home),
            _location(contact),
        )

    console.print()
    console.print(table)


def display_import_summary(result: ImportResult) -> None:
    """Summarize an import run: files, cards, drops, failures."""
    console.print()
    console.rule("[bold]vCard Import[/bold]")
    console.print()

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold")
    table.add_column(justify="right")

    table.add_row("Files processed:", str(result.files_processed))
    table.add_row("vCards found:", str(result.vcards_parsed))
    table.add_row("Contacts decoded:", f"[green]{len(result.contacts)}[/green]")
    if result.blocks_dropped:
        table.add_row("Dropped:", f"[dim]{result.blocks_dropped}[/dim]")
    console.print(table)

    for path in result.empty_files:
        console.print(f"[yellow]  No contacts found in {Path(path).name}.[/yellow]")
    for error in result.errors:
        console.print(f"[red]  {error}[/red]")
