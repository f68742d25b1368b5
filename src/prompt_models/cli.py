"""CLI for prompt-models - manage LLM model configurations."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any, TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from prompt_models.manager import ModelManager

T = TypeVar("T")

app = typer.Typer(
    name="prompt-models",
    help="Manage the LLM model configurations used by prompt tooling.",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)

StorageDirOption = Annotated[
    Path | None,
    typer.Option("--storage-dir", "-s", help="Directory holding the stored configurations"),
]

MASKED = "********"


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        from prompt_models import __version__

        typer.echo(f"prompt-models v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """Manage LLM model configurations."""
    from prompt_models.logging import clear_context, configure_logging
    from prompt_models.settings import settings

    configure_logging(json_output=settings.json_logs, log_level=settings.log_level)
    clear_context()


def _create_manager(storage_dir: Path | None) -> ModelManager:
    from prompt_models.logging import bind_context
    from prompt_models.manager import create_model_manager
    from prompt_models.settings import settings
    from prompt_models.storage import FileStorageProvider

    directory = storage_dir or settings.storage_dir
    bind_context(storage_dir=str(directory))
    return create_model_manager(FileStorageProvider(directory))


def _run(action: Callable[[], Awaitable[T]]) -> T:
    """Run an async action, turning configuration errors into exit code 1."""
    from prompt_models.import_export import ImportExportError
    from prompt_models.validation import ModelConfigError

    try:
        return asyncio.run(action())
    except (ModelConfigError, ImportExportError) as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e


def _masked(config: dict[str, Any]) -> dict[str, Any]:
    """Copy of a configuration with the API key hidden."""
    connection = config.get("connectionConfig")
    if isinstance(connection, dict) and connection.get("apiKey"):
        return {**config, "connectionConfig": {**connection, "apiKey": MASKED}}
    return config


@app.command()
def info(storage_dir: StorageDirOption = None) -> None:
    """Show configuration and registered providers."""
    from prompt_models import __version__
    from prompt_models.providers import provider_registry
    from prompt_models.settings import settings

    console.print(f"[bold]prompt-models[/bold] v{__version__}")
    console.print()
    console.print("[bold]Configuration:[/bold]")
    console.print(f"  Storage Dir: {storage_dir or settings.storage_dir}")
    console.print(f"  Storage Key: {settings.storage_key}")
    console.print(f"  Custom Endpoint: {settings.custom_api_base_url}")
    console.print(f"  Custom Model: {settings.custom_api_model}")

    configured = settings.configured_providers
    if configured:
        console.print(f"  API Keys: [green]{', '.join(configured)}[/green]")
    else:
        console.print("  API Keys: [yellow]none configured[/yellow]")

    console.print()
    console.print("[bold]Providers:[/bold]")
    for adapter in provider_registry.get_all():
        provider = adapter.get_provider()
        console.print(f"  {provider.id}: {provider.name} ({len(adapter.get_models())} models)")


@app.command("list")
def list_models(
    enabled: Annotated[
        bool,
        typer.Option("--enabled", "-e", help="Only show enabled models"),
    ] = False,
    storage_dir: StorageDirOption = None,
) -> None:
    """List model configurations."""
    manager = _create_manager(storage_dir)
    models = _run(manager.get_enabled_models if enabled else manager.get_all_models)

    if not models:
        console.print("[yellow]No models configured[/yellow]")
        return

    table = Table(title="Models")
    table.add_column("Key", style="cyan")
    table.add_column("Name")
    table.add_column("Provider")
    table.add_column("Model")
    table.add_column("Enabled")

    for model in models:
        table.add_row(
            model.id,
            model.name,
            model.provider_meta.id if model.provider_meta else "-",
            model.model_meta.id if model.model_meta else "-",
            "[green]yes[/green]" if model.enabled else "[dim]no[/dim]",
        )

    console.print(table)


@app.command()
def show(
    key: Annotated[str, typer.Argument(help="Model configuration key")],
    storage_dir: StorageDirOption = None,
) -> None:
    """Show one model configuration as JSON."""
    manager = _create_manager(storage_dir)
    model = _run(lambda: manager.get_model(key))

    if model is None:
        error_console.print(f"[red]Error:[/red] Model {escape(key)} does not exist")
        raise typer.Exit(code=1)

    console.print_json(json.dumps(_masked(model.to_json_dict()), ensure_ascii=False))


@app.command()
def enable(
    key: Annotated[str, typer.Argument(help="Model configuration key")],
    storage_dir: StorageDirOption = None,
) -> None:
    """Enable a model after validating its configuration."""
    manager = _create_manager(storage_dir)
    _run(lambda: manager.enable_model(key))
    console.print(f"[green]Enabled[/green] {escape(key)}")


@app.command()
def disable(
    key: Annotated[str, typer.Argument(help="Model configuration key")],
    storage_dir: StorageDirOption = None,
) -> None:
    """Disable a model."""
    manager = _create_manager(storage_dir)
    _run(lambda: manager.disable_model(key))
    console.print(f"[yellow]Disabled[/yellow] {escape(key)}")


@app.command()
def delete(
    key: Annotated[str, typer.Argument(help="Model configuration key")],
    storage_dir: StorageDirOption = None,
) -> None:
    """Delete a model configuration."""
    manager = _create_manager(storage_dir)
    _run(lambda: manager.delete_model(key))
    console.print(f"[green]Deleted[/green] {escape(key)}")


@app.command()
def export(
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write to this file instead of stdout"),
    ] = None,
    storage_dir: StorageDirOption = None,
) -> None:
    """Export all model configurations as JSON."""
    manager = _create_manager(storage_dir)
    models = _run(manager.export_data)
    content = json.dumps([model.to_json_dict() for model in models], indent=2, ensure_ascii=False)

    if output is None:
        typer.echo(content)
        return

    output.write_text(content + "\n", encoding="utf-8")
    console.print(f"[green]Exported[/green] {len(models)} models to {output}")


@app.command("import")
def import_models(
    file: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, readable=True, help="JSON file to import"),
    ],
    storage_dir: StorageDirOption = None,
) -> None:
    """Import model configurations from a JSON file."""
    try:
        data = json.loads(file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        error_console.print(f"[red]Error:[/red] {escape(str(file))} is not valid JSON: {escape(str(e))}")
        raise typer.Exit(code=1) from e

    manager = _create_manager(storage_dir)
    result = _run(lambda: manager.import_data(data))

    console.print(
        f"[green]Imported[/green] {len(result.imported)} new, "
        f"{len(result.updated)} updated, {result.failed_count} skipped"
    )
    for failure in result.failures:
        label = failure.key or f"#{failure.index}"
        console.print(f"  [yellow]Skipped[/yellow] {escape(label)}: {escape(failure.error)}")
