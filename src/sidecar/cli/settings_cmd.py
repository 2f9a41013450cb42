"""``sidecar settings``: print and check the resolved configuration."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console

settings_app = typer.Typer(help="Print and check the resolved configuration.")
console = Console()


def _resolve(path: str, root: Path) -> Path:
    candidate = Path(path).expanduser()
    return candidate if candidate.is_absolute() else root / candidate


@settings_app.command("show")
def show_settings(
    section: Optional[str] = typer.Argument(None, help="Only print one section, e.g. 'capture'."),
) -> None:
    """Print the merged settings as JSON."""
    from sidecar.settings import get_settings

    dumped = get_settings().model_dump(mode="json")
    if section is not None:
        if section not in dumped or not isinstance(dumped[section], dict):
            console.print(f"[red]Unknown settings section:[/red] {section}")
            raise typer.Exit(code=1)
        dumped = dumped[section]
    console.print_json(json.dumps(dumped, default=str))


@settings_app.command("validate")
def validate_settings() -> None:
    """Load every settings layer and report where files will be written."""
    from sidecar.settings import get_settings

    try:
        settings = get_settings()
    except ValidationError as exc:
        console.print(f"[red]Invalid settings[/red] ({exc.error_count()} error(s))")
        for error in exc.errors():
            location = ".".join(str(part) for part in error["loc"])
            console.print(f"  {location}: {error['msg']}")
        raise typer.Exit(code=1)

    root = settings.project_root
    console.print(f"[green]Settings are valid[/green] (env={settings.env})")
    console.print(f"  exports   -> {_resolve(settings.export.exports_dir, root)}")
    console.print(f"  downloads -> {_resolve(settings.export.downloads_dir, root)}")
    console.print(f"  url store -> {_resolve(settings.store.url_store_path, root)}")
