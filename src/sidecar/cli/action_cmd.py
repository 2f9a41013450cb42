"""CLI commands that run catalog actions against a live page.

Each command launches Chromium, navigates to the URL, resolves the active
scenario, and runs one reader or writer through the ``SessionController``.
Reader results can be piped straight into a processor with ``--process``.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console

action_app = typer.Typer(help="Run readers and writers against a live page.")
console = Console()

# Image payload keys elided from terminal output unless --full is given.
_BULKY_IMAGE_KEYS = ("base64", "dataUrl")


def _context_for(controller: Any, url: str) -> tuple[str, str] | None:
    """Return ``(source_id, scenario_id)`` for *url*, falling back to the universal scenario."""
    source, scenario = controller.resolve(url)
    if source is not None and scenario is not None:
        return source.id, scenario.id
    universal = controller.registry.universal
    if universal is None:
        return None
    universal_scenario = controller.detector.detect(universal, url)
    if universal_scenario is None:
        return None
    return universal.id, universal_scenario.id


def _elide_images(result: dict[str, Any]) -> dict[str, Any]:
    data = result.get("data")
    if result.get("dataType") != "image" or not isinstance(data, dict):
        return result
    trimmed = {k: v for k, v in data.items() if k not in _BULKY_IMAGE_KEYS}
    trimmed["bytes"] = len(data.get("base64", "")) * 3 // 4
    return {**result, "data": trimmed}


def _print_result(result: dict[str, Any], full: bool) -> None:
    shown = result if full else _elide_images(result)
    console.print_json(json.dumps(shown, indent=2, default=str))
    processed = result.get("processed")
    if not result.get("success") or (processed is not None and not processed.get("success")):
        raise typer.Exit(code=1)


async def _run(
    url: str,
    action_id: str,
    *,
    writer: bool,
    input_data: Any = None,
    processor_id: str | None = None,
) -> dict[str, Any]:
    from sidecar.browser.playwright_surface import launch_surface
    from sidecar.session import SessionController
    from sidecar.settings import get_settings

    settings = get_settings()
    controller = SessionController.from_settings(settings)
    await controller.announce()

    async with launch_surface(settings.browser) as surface:
        await surface.navigate(url, timeout_ms=settings.browser.timeout_ms)
        live_url = surface.url
        await controller.on_navigation(live_url)

        context = _context_for(controller, live_url)
        if context is None:
            return {"success": False, "error": f"No scenario available for {live_url}"}
        source_id, scenario_id = context

        if writer:
            return await controller.run_writer(surface, source_id, scenario_id, action_id, input_data)

        result = await controller.run_reader(surface, source_id, scenario_id, action_id)
        if processor_id and result.get("success"):
            result["processed"] = await controller.run_processor(result["recordId"], processor_id)
        return result


# ---------------------------------------------------------------------------
# sidecar action read <url> <reader>
# ---------------------------------------------------------------------------


@action_app.command("read")
def action_read(
    url: str = typer.Argument(..., help="Page to open."),
    reader_id: str = typer.Argument(..., help="Reader ID to run (see 'sidecar catalog match')."),
    process: Optional[str] = typer.Option(None, "--process", "-p", help="Processor to apply to the result."),
    full: bool = typer.Option(False, "--full", help="Print image payloads in full."),
) -> None:
    """Run a reader on a page and print its result."""
    result = asyncio.run(_run(url, reader_id, writer=False, processor_id=process))
    _print_result(result, full)


# ---------------------------------------------------------------------------
# sidecar action write <url> <writer>
# ---------------------------------------------------------------------------


@action_app.command("write")
def action_write(
    url: str = typer.Argument(..., help="Page to open."),
    writer_id: str = typer.Argument(..., help="Writer ID to run."),
    text: Optional[str] = typer.Option(None, "--input", "-i", help="Input passed to the writer as a string."),
    input_file: Optional[Path] = typer.Option(
        None, "--input-json", help="JSON file whose contents are passed to the writer."
    ),
) -> None:
    """Run a writer on a page, optionally with input data."""
    if text is not None and input_file is not None:
        console.print("[red]Use either --input or --input-json, not both.[/red]")
        raise typer.Exit(code=2)

    input_data: Any = text
    if input_file is not None:
        try:
            input_data = json.loads(input_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            console.print(f"[red]Cannot read input file:[/red] {e}")
            raise typer.Exit(code=2)

    result = asyncio.run(_run(url, writer_id, writer=True, input_data=input_data))
    _print_result(result, full=True)


# ---------------------------------------------------------------------------
# sidecar action test <reader> <fixture>
# ---------------------------------------------------------------------------


@action_app.command("test")
def action_test(
    source_id: str = typer.Argument(..., help="Source ID."),
    action_id: str = typer.Argument(..., help="Reader or writer ID."),
    fixture: Path = typer.Argument(..., exists=True, dir_okay=False, help="Local HTML fixture to run against."),
) -> None:
    """Run an action's script against a local HTML fixture."""
    from sidecar.catalog import build_registry, find_reader, find_writer

    source = build_registry().get(source_id)
    if source is None:
        console.print(f"[red]Source not found:[/red] {source_id}")
        raise typer.Exit(code=1)

    action = None
    for scenario in source.scenarios:
        action = find_reader(scenario, action_id) or find_writer(scenario, action_id)
        if action is not None:
            break
    if action is None:
        console.print(f"[red]Action not found:[/red] {action_id}")
        raise typer.Exit(code=1)

    async def _test() -> Any:
        from sidecar.browser.executor import ActionExecutor
        from sidecar.browser.playwright_surface import launch_surface
        from sidecar.settings import get_settings

        settings = get_settings()
        async with launch_surface(settings.browser) as surface:
            return await ActionExecutor.from_settings(settings).test_script(surface, action.script, fixture)

    try:
        value = asyncio.run(_test())
    except Exception as e:
        console.print(f"[red]Script failed:[/red] {e}")
        raise typer.Exit(code=1)
    console.print_json(json.dumps(value, indent=2, default=str))
