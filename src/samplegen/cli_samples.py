"""Sample CLI commands -- samplegen samples list|show."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

samples_app = typer.Typer(name="samples", help="Browse the sample catalog.")

_console = Console()


def _slot_label(categories: tuple[str, ...]) -> str:
    return " | ".join(categories)


@samples_app.command("list")
def list_samples(
    as_json: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """List the samples in the catalog."""
    from samplegen.cli import create_context, error_handler, json_output

    with error_handler(console=_console):
        ctx = create_context()
        samples = ctx.catalog.list_samples()
        rows = [
            {
                "id": s.id,
                "name": s.name,
                "slots": [[str(c) for c in slot.categories] for slot in s.slots],
            }
            for s in samples
        ]

        if not rows:
            if as_json:
                json_output([], as_json=True)
            else:
                _console.print("[dim]No samples available.[/dim]")
            return

        if json_output(rows, as_json=as_json) is None:
            return

        table = Table(title="Samples")
        table.add_column("ID", style="cyan")
        table.add_column("Name")
        table.add_column("Model slots")
        for row in rows:
            table.add_row(
                row["id"],
                row["name"],
                "; ".join(_slot_label(tuple(slot)) for slot in row["slots"]),
            )
        _console.print(table)


@samples_app.command("show")
def show_sample(
    sample_id: str = typer.Argument(help="Sample to show."),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Show a sample's declared metadata and raw template."""
    from samplegen.cli import create_context, error_handler, get_sample_or_fail, json_output

    with error_handler(console=_console):
        ctx = create_context()
        sample = get_sample_or_fail(ctx, sample_id)

        if as_json:
            json_output(sample.model_dump(mode="json"), as_json=True)
            return

        _console.print(f"[bold]{sample.name}[/bold] [dim]({sample.id})[/dim]")
        if sample.description:
            _console.print(sample.description)
        _console.print(f"[bold]Modules:[/bold] {', '.join(sorted(sample.modules)) or '-'}")
        _console.print(
            f"[bold]Dependencies:[/bold] {', '.join(sorted(sample.dependencies)) or '-'}"
        )
        _console.print(
            Panel(
                Syntax(sample.source, "python", theme="monokai"),
                title=f"Template: {sample.id}",
                border_style="blue",
            )
        )
