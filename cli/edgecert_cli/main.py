from __future__ import annotations

import typer

from .commands import apps_cmd, domain_cmd, settings_cmd, ssl_cmd
from .logging_ import setup_logging


def _build_app() -> typer.Typer:
    app = typer.Typer(
        name="edgecert",
        help="Pick and apply a TLS certificate strategy for domains behind nginx.",
        no_args_is_help=True,
    )

    app.add_typer(domain_cmd.app, name="domain")
    app.add_typer(ssl_cmd.app, name="ssl")
    app.add_typer(settings_cmd.app, name="settings")
    app.add_typer(apps_cmd.app, name="apps")

    @app.callback()
    def _main(
            verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logs."),
    ):
        setup_logging(verbose)

    return app


app = _build_app()
