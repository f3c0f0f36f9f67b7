from __future__ import annotations

import typer
from rich.table import Table

from .. import console
from ..apps import APP_PROFILES

app = typer.Typer(help="Known upstream app profiles.")


@app.command("list")
def list_apps():
    table = Table(title="App profiles")
    table.add_column("name", style="bold")
    table.add_column("port")
    table.add_column("websocket")
    table.add_column("description")
    for profile in APP_PROFILES.values():
        table.add_row(profile.name, str(profile.port), "yes" if profile.websocket else "no", profile.description)
    console.print(table)
