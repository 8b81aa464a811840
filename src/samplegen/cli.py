"""CLI foundation for samplegen: the Typer app and its commands.

Defines the main Typer app, the ``samples`` sub-app, the AppContext
dataclass for backend dependency injection, and helper utilities
(json_output, error_handler, resolve_or_exit).
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import typer
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from samplegen.cache import FileModelCache
from samplegen.catalog import load_catalog
from samplegen.cli_samples import samples_app
from samplegen.config import get_settings
from samplegen.engine import SampleEngine
from samplegen.exporter import ProjectExporter

if TYPE_CHECKING:
    from collections.abc import Generator

    from samplegen.cache import ModelCache
    from samplegen.catalog import ModelCatalog
    from samplegen.config import SamplegenSettings
    from samplegen.models import ModelDetails, ResolvedSelection, Sample

logger = logging.getLogger(__name__)

# Exit code for a selection whose models are not downloaded yet.
EXIT_NOT_READY = 2


# ---------------------------------------------------------------------------
# AppContext: backend dependency container
# ---------------------------------------------------------------------------


@dataclass
class AppContext:
    """Container for the backend objects CLI commands work with."""

    settings: SamplegenSettings
    catalog: ModelCatalog
    cache: ModelCache
    engine: SampleEngine
    exporter: ProjectExporter


def create_context(settings: SamplegenSettings | None = None) -> AppContext:
    """Load the catalog and model cache and wire up the engine.

    Parameters
    ----------
    settings:
        Settings to use. Defaults to :func:`get_settings`.
    """
    resolved = settings if settings is not None else get_settings()
    catalog = load_catalog(resolved.catalog_dir)
    cache = FileModelCache(resolved.cache_index)
    engine = SampleEngine(catalog, cache, resolved)
    return AppContext(
        settings=resolved,
        catalog=catalog,
        cache=cache,
        engine=engine,
        exporter=ProjectExporter(engine),
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def json_output(data: Any, *, as_json: bool) -> Any:
    """Conditionally print data as JSON or return it for Rich formatting.

    Returns None if printed as JSON, otherwise the original data.
    """
    if as_json:
        print(json.dumps(data, indent=2, default=str))
        return None
    return data


@contextmanager
def error_handler(
    console: Console | None = None,
) -> Generator[None, None, None]:
    """Catch exceptions, print a Rich-formatted error and exit with code 1.

    SystemExit, KeyboardInterrupt and typer.Exit are allowed to propagate.
    """
    if console is None:
        console = Console(stderr=True)
    try:
        yield
    except (SystemExit, KeyboardInterrupt, typer.Exit):
        raise
    except Exception as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc


def get_sample_or_fail(ctx: AppContext, sample_id: str) -> Sample:
    sample = ctx.catalog.get_sample(sample_id)
    if sample is None:
        msg = f"Unknown sample: {sample_id!r}"
        raise ValueError(msg)
    return sample


def get_models_or_fail(ctx: AppContext, model_ids: list[str]) -> list[ModelDetails | None]:
    descriptors: list[ModelDetails | None] = []
    for model_id in model_ids:
        details = ctx.catalog.get_model(model_id)
        if details is None:
            msg = f"Unknown model: {model_id!r}"
            raise ValueError(msg)
        descriptors.append(details)
    return descriptors


def resolve_or_exit(
    ctx: AppContext, sample: Sample, model_ids: list[str], console: Console
) -> ResolvedSelection:
    """Resolve the selection, exiting with EXIT_NOT_READY when it is not ready."""
    selection = ctx.engine.resolve_selection(sample, get_models_or_fail(ctx, model_ids))
    if selection is None:
        console.print(
            "[bold yellow]Not ready:[/bold yellow] select every model the sample needs "
            "and download it first."
        )
        raise typer.Exit(code=EXIT_NOT_READY)
    return selection


# ---------------------------------------------------------------------------
# Main app
# ---------------------------------------------------------------------------

app = typer.Typer(
    name="samplegen",
    help="Render runnable AI model samples for a chosen set of models.",
    no_args_is_help=True,
)

app.add_typer(samples_app, name="samples")

_MODEL_OPTION_HELP = "Model id from the catalog; pass twice for two-model samples."


def run_cli() -> None:
    """Entry point for the ``samplegen`` console script."""
    app()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Configure logging from the settings."""
    level = "DEBUG" if verbose else get_settings().log_level
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


# ---------------------------------------------------------------------------
# Top-level commands
# ---------------------------------------------------------------------------


@app.command()
def render(
    sample_id: str = typer.Argument(help="Sample to render."),
    model: list[str] = typer.Option(..., "--model", "-m", help=_MODEL_OPTION_HELP),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write source to a file."),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Render a sample for the chosen models."""
    console = Console()
    with error_handler():
        ctx = create_context()
        sample = get_sample_or_fail(ctx, sample_id)
        selection = resolve_or_exit(ctx, sample, model, console)
        source = ctx.engine.render_sample(sample, selection)

        if output is not None:
            output.write_text(source, encoding="utf-8")
            console.print(f"[green]Wrote[/green] {output}")
            return

        if json_output({"sample_id": sample.id, "source": source}, as_json=as_json) is None:
            return

        console.print(
            Panel(
                Syntax(source, "python", theme="monokai"),
                title=f"Sample: {sample.name}",
                border_style="blue",
            )
        )


@app.command()
def closure(
    sample_id: str = typer.Argument(help="Sample to inspect."),
    model: list[str] = typer.Option(..., "--model", "-m", help=_MODEL_OPTION_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Show the helper modules and dependencies a rendered sample needs."""
    console = Console()
    with error_handler():
        ctx = create_context()
        sample = get_sample_or_fail(ctx, sample_id)
        selection = resolve_or_exit(ctx, sample, model, console)
        modules = sorted(str(m) for m in ctx.engine.module_closure(sample, selection))
        dependencies = sorted(ctx.engine.dependency_closure(sample, selection))

        data = {"sample_id": sample.id, "modules": modules, "dependencies": dependencies}
        if json_output(data, as_json=as_json) is None:
            return

        table = Table(title=f"Closure: {sample.name}")
        table.add_column("Kind", style="bold")
        table.add_column("Name", style="cyan")
        for name in modules:
            table.add_row("module", name)
        for name in dependencies:
            table.add_row("dependency", name)
        console.print(table)


@app.command()
def export(
    sample_id: str = typer.Argument(help="Sample to export."),
    model: list[str] = typer.Option(..., "--model", "-m", help=_MODEL_OPTION_HELP),
    output: Path = typer.Option(..., "--output", "-o", help="Target project directory."),
    force: bool = typer.Option(False, "--force", help="Write into a non-empty directory."),
) -> None:
    """Export a rendered sample as a standalone project."""
    console = Console()
    with error_handler():
        ctx = create_context()
        sample = get_sample_or_fail(ctx, sample_id)
        selection = resolve_or_exit(ctx, sample, model, console)
        result = ctx.exporter.export(sample, selection, output, overwrite=force)
        for path in result.files:
            console.print(f"[green]Wrote[/green] {path}")


@app.command()
def models(
    as_json: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """List catalog models and whether they are downloaded."""
    console = Console()
    with error_handler():
        ctx = create_context()
        rows = [
            {
                "id": m.id,
                "name": m.name,
                "categories": [str(c) for c in m.categories],
                "accelerators": [str(a) for a in m.accelerators],
                "ready": m.is_api or ctx.cache.get_cached_model(m.url) is not None,
            }
            for m in ctx.catalog.list_models()
        ]
        if json_output(rows, as_json=as_json) is None:
            return

        table = Table(title="Models")
        table.add_column("ID", style="cyan")
        table.add_column("Name")
        table.add_column("Categories")
        table.add_column("Accelerators")
        table.add_column("Ready")
        for row in rows:
            table.add_row(
                row["id"],
                row["name"],
                ", ".join(row["categories"]),
                ", ".join(row["accelerators"]),
                "[green]yes[/green]" if row["ready"] else "[dim]no[/dim]",
            )
        console.print(table)


@app.command()
def apis(
    as_json: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """List the platform APIs available to samples."""
    console = Console()
    with error_handler():
        ctx = create_context()
        definitions = ctx.catalog.api_definitions()
        if json_output([d.model_dump(mode="json") for d in definitions], as_json=as_json) is None:
            return

        if not definitions:
            console.print("[dim]No platform APIs defined.[/dim]")
            return

        table = Table(title="Platform APIs")
        table.add_column("Icon")
        table.add_column("Name", style="cyan")
        table.add_column("Category")
        table.add_column("Description")
        for d in definitions:
            table.add_row(d.icon_glyph, d.name, str(d.category), d.description or "")
        console.print(table)
