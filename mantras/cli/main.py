"""Main CLI entry point using Typer."""

import json

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from mantras import __version__
from mantras.core.config import get_settings
from mantras.core.logging import configure_logging

app = typer.Typer(
    name="mantras",
    help="Mantras - plan requests as dependency-linked tasks",
    add_completion=True,
    rich_markup_mode="rich",
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Mantras[/bold blue] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    Mantras - break requests into ordered tasks and track them.

    Plans live in memory; use [bold]serve[/bold] to keep them across
    requests.
    """
    configure_logging()


@app.command()
def plan(
    request: str = typer.Argument(..., help="Request to plan"),
    decompose: bool | None = typer.Option(
        None,
        "--decompose/--no-decompose",
        help="Split the request into a task chain (defaults to settings).",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the raw result as JSON.",
    ),
) -> None:
    """
    Create an execution plan and show its tasks.

    Example:
        mantras plan "调试JavaScript性能问题"
    """
    from mantras.planning.coordinator import ExecutionCoordinator

    if decompose is None:
        decompose = get_settings().mantras_default_auto_decompose

    coordinator = ExecutionCoordinator()
    try:
        result = coordinator.create_execution_plan(request, auto_decompose=decompose)
    except ValueError as e:
        console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(code=1) from e

    if as_json:
        console.print_json(json.dumps(result, ensure_ascii=False))
        return

    console.print(
        Panel(
            f"[bold]{result['plan']['title']}[/bold]\n"
            f"[dim]{result['plan']['id']} ({result['plan']['metadata']['template']})[/dim]",
            title="[bold blue]Mantras[/bold blue]",
            border_style="blue",
        )
    )

    titles = {task["id"]: task["title"] for task in result["tasks"]}

    table = Table(title="Tasks")
    table.add_column("#", style="cyan")
    table.add_column("Title", style="bold")
    table.add_column("Priority")
    table.add_column("Depends on")

    for index, task in enumerate(result["tasks"]):
        deps = ", ".join(titles.get(d, d) for d in task["dependencies"]) or "-"
        table.add_row(str(index + 1), task["title"], task["priority"], deps)

    console.print(table)

    for line in result["recommendations"]:
        console.print(f"[dim]- {line}[/dim]")
    for line in result["next_actions"]:
        console.print(f"[green]> {line}[/green]")


@app.command()
def decompose(
    request: str = typer.Argument(..., help="Request to decompose"),
) -> None:
    """
    Preview the task breakdown for a request without storing anything.
    """
    from mantras.planning.decomposer import Decomposer

    decomposer = Decomposer()
    template = decomposer.classify(request)
    try:
        drafts = decomposer.decompose(request)
    except ValueError as e:
        console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(code=1) from e

    table = Table(title=f"Task Breakdown ({template.name})")
    table.add_column("Step", style="cyan")
    table.add_column("Title", style="bold")
    table.add_column("Description")
    table.add_column("Priority")

    for index, draft in enumerate(drafts):
        table.add_row(
            str(index + 1),
            draft.title,
            draft.description,
            draft.priority.value,
        )

    console.print(table)


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Host to bind to"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to listen on"),
) -> None:
    """
    Start the planning API server.

    Example:
        mantras serve --port 3000
    """
    import uvicorn

    from mantras.api.main import app as api_app

    settings = get_settings()
    host = host or settings.mantras_api_host
    port = port or settings.mantras_api_port

    console.print(
        Panel(
            f"[bold]API:[/bold]      http://{host}:{port}/api\n"
            f"[bold]API Docs:[/bold] http://{host}:{port}/docs\n"
            f"[bold]Health:[/bold]   http://{host}:{port}/health",
            title="[bold cyan]Mantras API[/bold cyan]",
            border_style="cyan",
        )
    )

    uvicorn.run(api_app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    app()
