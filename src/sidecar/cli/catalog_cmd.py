"""CLI commands for the source catalog.

Subcommands for listing sources, inspecting their scenarios, and checking
which scenario a URL resolves to, all without launching a browser.
"""

from __future__ import annotations

import json

import typer
from rich.console import Console
from rich.table import Table

catalog_app = typer.Typer(help="Inspect the source catalog — list, show, and test URL matching.")
console = Console()


def _source_detail(source) -> dict:
    """Return a JSON-ready view of *source* without action scripts."""
    return {
        "id": source.id,
        "name": source.name,
        "domains": list(source.domains),
        "scenarios": [
            {
                "id": sc.id,
                "name": sc.name,
                "url_pattern": sc.url_pattern,
                "readers": [
                    {"id": r.id, "name": r.name, "data_type": r.data_type.value, "kind": r.kind.value}
                    for r in sc.readers
                ],
                "writers": [{"id": w.id, "name": w.name} for w in sc.writers],
            }
            for sc in source.scenarios
        ],
    }


# ---------------------------------------------------------------------------
# sidecar catalog list
# ---------------------------------------------------------------------------


@catalog_app.command("list")
def catalog_list(
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON."),
) -> None:
    """List all registered sources."""
    from sidecar.catalog import build_registry

    registry = build_registry()
    sources = list(registry.all())

    if json_output:
        data = [
            {
                "id": s.id,
                "name": s.name,
                "domains": list(s.domains),
                "scenarios": [sc.id for sc in s.scenarios],
            }
            for s in sources
        ]
        console.print_json(json.dumps(data, indent=2))
        return

    table = Table(title="Sources")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Domains", style="dim", max_width=40)
    table.add_column("Scenarios", justify="right")

    for s in sources:
        table.add_row(
            s.id,
            s.name,
            ", ".join(s.domains) if s.domains else "(all)",
            str(len(s.scenarios)),
        )

    console.print(table)
    console.print(f"\n[bold]{len(sources)}[/bold] source(s) registered")


# ---------------------------------------------------------------------------
# sidecar catalog show <id>
# ---------------------------------------------------------------------------


@catalog_app.command("show")
def catalog_show(
    source_id: str = typer.Argument(..., help="Source ID to display."),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON."),
) -> None:
    """Display the scenarios, readers, and writers of one source."""
    from sidecar.catalog import build_registry

    registry = build_registry()
    source = registry.get(source_id)

    if source is None:
        console.print(f"[red]Source not found:[/red] {source_id}")
        available = [s.id for s in registry.all()]
        if available:
            console.print(f"  Available: {', '.join(available)}")
        raise typer.Exit(code=1)

    if json_output:
        console.print_json(json.dumps(_source_detail(source), indent=2))
        return

    console.print(f"[bold cyan]{source.id}[/bold cyan]  {source.name}")
    console.print(f"  Domains: {', '.join(source.domains) if source.domains else '(all)'}")

    for scenario in source.scenarios:
        console.print(f"\n  [bold]{scenario.id}[/bold]  {scenario.name}")
        console.print(f"    Pattern: {scenario.url_pattern}")
        for reader in scenario.readers:
            console.print(f"    [green]reader[/green] {reader.id:<24} {reader.data_type.value:<6} {reader.description}")
        for writer in scenario.writers:
            console.print(f"    [yellow]writer[/yellow] {writer.id:<24} {'':<6} {writer.description}")


# ---------------------------------------------------------------------------
# sidecar catalog match <url>
# ---------------------------------------------------------------------------


@catalog_app.command("match")
def catalog_match(
    url: str = typer.Argument(..., help="URL to resolve against the catalog."),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON."),
) -> None:
    """Show which source and scenario a URL resolves to."""
    from sidecar.browser.executor import ActionExecutor
    from sidecar.catalog import ScenarioDetector, build_registry
    from sidecar.processors import ProcessorPipeline
    from sidecar.session import SessionController
    from sidecar.store.data_store import DataStore

    controller = SessionController(
        registry=build_registry(),
        detector=ScenarioDetector(),
        executor=ActionExecutor(),
        store=DataStore(),
        pipeline=ProcessorPipeline(),
    )
    payload = controller.describe_url(url)

    if json_output:
        console.print_json(json.dumps(payload, indent=2))
        return

    source = payload["source"]
    scenario = payload["scenario"]
    if source is None:
        console.print(f"[yellow]No source matches[/yellow] {url}")
        raise typer.Exit(code=1)

    console.print(f"[bold]Source:[/bold]   [cyan]{source['id']}[/cyan] ({source['name']})")
    if scenario is None:
        console.print("[bold]Scenario:[/bold] [yellow](none)[/yellow]")
        return

    console.print(f"[bold]Scenario:[/bold] [cyan]{scenario['id']}[/cyan] ({scenario['name']})")
    for reader in scenario["readers"]:
        console.print(f"  [green]reader[/green] {reader['id']}")
    for writer in scenario["writers"]:
        console.print(f"  [yellow]writer[/yellow] {writer['id']}")
