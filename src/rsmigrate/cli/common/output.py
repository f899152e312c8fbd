"""Output formatting utilities for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from rich.console import Console
from rich.prompt import Confirm
from rich.table import Table
from rich.theme import Theme

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)


def _yes_no(value: bool) -> str:
    return "[ok]yes[/]" if value else "[meta]no[/]"


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {msg}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {msg}")

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs."""
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {v}")

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """Ask the user for a yes/no confirmation."""
        return Confirm.ask(message, default=default, console=console)

    def schemas_table(self, schemas: Iterable[str], title: str = "Schemas") -> None:
        """Render a single-column table of schema names."""
        t = Table(title=title, show_lines=False)
        t.add_column("Schema", style="ok")

        for s in schemas:
            t.add_row(str(s))

        console.print(t)

    def tables_table(self, tables: Iterable[Any], title: str = "Tables") -> None:
        """
        Expects objects with .schema and .table (like rsmigrate.core.catalog.TableRef)
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Schema", style="meta")
        t.add_column("Table", style="ok")

        for ref in tables:
            t.add_row(ref.schema, ref.table)

        console.print(t)

    def migration_results_table(
        self, results: Iterable[Any], title: str = "Migrated tables"
    ) -> None:
        """
        Expects TableMigrationResult objects (.table, .exported, .truncated,
        .loaded, .deduplicated).
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Table", style="ok")
        t.add_column("Exported")
        t.add_column("Truncated")
        t.add_column("Loaded")
        t.add_column("Deduplicated")

        for r in results:
            t.add_row(
                r.table.full_name,
                _yes_no(r.exported),
                _yes_no(r.truncated),
                _yes_no(r.loaded),
                _yes_no(r.deduplicated),
            )

        console.print(t)


out = Out()
