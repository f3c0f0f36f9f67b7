from __future__ import annotations

import os

import typer

from .. import console
from ..config import SETTING_KEYS, config_path, default_config, get_setting, load_config, save_config, set_setting
from ..certificates import validate_email

app = typer.Typer(help="Manage local CLI settings (~/.config/edgecert/config.toml).")


@app.command("init")
def init_settings(
        force: bool = typer.Option(False, "--force", help="Overwrite existing config."),
        email: str = typer.Option(
            ...,
            "--email",
            prompt="Email for Let's Encrypt registration",
            help="Default email for certbot.",
        ),
):
    path = config_path()
    if os.path.exists(path) and not force:
        console.info(f"Config already exists: {path}")
        console.info("Use --force to overwrite.")
        return

    cfg = default_config()
    try:
        cfg.email = validate_email(email)
    except ValueError as exc:
        console.err(str(exc))
        raise typer.Exit(code=2)
    saved = save_config(cfg)
    console.ok(f"Config written: {saved}")


@app.command("show")
def show_settings():
    cfg = load_config()
    for key in SETTING_KEYS:
        value = get_setting(cfg, key)
        if isinstance(value, list):
            value = ",".join(value)
        console.console.print(f"{key}={value if value not in (None, '') else '(empty)'}")


@app.command("get")
def get_setting_cmd(
        key: str = typer.Argument(..., help=f"Setting key ({', '.join(SETTING_KEYS)})."),
):
    cfg = load_config()
    try:
        value = get_setting(cfg, key)
    except KeyError:
        console.err(f"Unknown setting: {key}")
        raise typer.Exit(code=2)
    if isinstance(value, list):
        value = ",".join(value)
    console.console.print("" if value is None else str(value))


@app.command("set")
def set_setting_cmd(
        key: str = typer.Argument(..., help=f"Setting key ({', '.join(SETTING_KEYS)})."),
        value: str = typer.Argument(..., help="New value. Lists are comma-separated."),
):
    cfg = load_config()
    try:
        if key.strip().lower() == "email" and value.strip():
            value = validate_email(value)
        set_setting(cfg, key, value)
    except KeyError:
        console.err(f"Unknown setting: {key}")
        raise typer.Exit(code=2)
    except ValueError as exc:
        console.err(str(exc))
        raise typer.Exit(code=2)
    saved = save_config(cfg)
    console.ok(f"Settings updated: {saved}")
