from __future__ import annotations

import typer

from edgecert_core import (
    CdnConfig,
    ConfigurationError,
    EdgecertError,
    ResolutionError,
    ServerIdentity,
    UnreachableDomainError,
    load_cdn_config,
    resolve_certificate_strategy,
)
from edgecert_core.public_ip import discover_public_ip, validate_server_ip

from .. import console
from ..config import AppConfig, load_config, resolve_cdn_config_path, resolve_dns_timeout
from ..formatting import diagnostics_table, format_values

app = typer.Typer(help="Inspect a domain's DNS and certificate strategy.")


def server_identity(cfg: AppConfig, server_ip: str | None) -> ServerIdentity:
    if server_ip:
        return validate_server_ip(server_ip)
    return discover_public_ip(cfg.public_ip_services, timeout=resolve_dns_timeout(cfg))


def cdn_config(cfg: AppConfig, override: str | None) -> CdnConfig:
    return load_cdn_config(resolve_cdn_config_path(cfg, override))


def report_resolver_error(exc: Exception) -> None:
    if isinstance(exc, UnreachableDomainError):
        console.err(str(exc))
        console.print(f"  expected: {exc.expected_ip}")
        console.print(f"  actual:   {format_values(exc.actual_ips)}")
        if exc.diagnostics and exc.diagnostics.snapshot.is_empty:
            console.info("The domain has no NS or A records. Check the spelling and your DNS provider.")
        return
    if isinstance(exc, ResolutionError):
        console.err(f"Lookup failed ({exc.target}): {exc}")
        return
    if isinstance(exc, ConfigurationError):
        console.err(f"Configuration error: {exc}")
        return
    console.err(str(exc))


@app.command("check")
def check_domain(
        domain: str = typer.Argument(..., help="Domain to inspect (e.g. app.example.com)."),
        server_ip: str | None = typer.Option(
            None,
            "--server-ip",
            help="Public IP of this server. Discovered automatically when omitted.",
        ),
        cdn_config_path: str | None = typer.Option(
            None,
            "--cdn-config",
            help="TOML file with CDN nameserver suffixes and IP ranges.",
        ),
        json_output: bool = typer.Option(False, "--json", help="Output JSON only."),
):
    """Resolve DNS for DOMAIN and report which certificate strategy applies.

    Examples:
      edgecert domain check app.example.org
      edgecert domain check app.example.org --server-ip 203.0.113.9 --json
    """
    cfg = load_config()
    try:
        cdn = cdn_config(cfg, cdn_config_path)
        server = server_identity(cfg, server_ip)
        decision, diagnostics = resolve_certificate_strategy(
            domain,
            server,
            cdn,
            timeout=resolve_dns_timeout(cfg),
        )
    except UnreachableDomainError as exc:
        if json_output:
            payload = exc.diagnostics.to_dict() if exc.diagnostics else {"domain": exc.domain}
            payload["error"] = str(exc)
            payload["kind"] = type(exc).__name__
            console.print_json(payload)
        else:
            if exc.diagnostics:
                console.print(diagnostics_table(exc.diagnostics))
            report_resolver_error(exc)
        raise typer.Exit(code=2)
    except (EdgecertError, ValueError) as exc:
        if json_output:
            console.print_json({"domain": domain, "error": str(exc), "kind": type(exc).__name__})
        else:
            report_resolver_error(exc)
        raise typer.Exit(code=2)

    if json_output:
        payload = diagnostics.to_dict()
        payload["strategy"] = decision.strategy.value if decision.strategy else None
        payload["choices"] = [choice.value for choice in decision.choices]
        console.print_json(payload)
        return

    console.print(diagnostics_table(diagnostics))
    if decision.strategy:
        console.ok(f"Domain points to this server. Strategy: {decision.strategy.label}.")
        return
    console.ok(f"Domain is proxied by {cdn.name}; IP mismatch is expected.")
    console.info("Available strategies:")
    for choice in decision.choices:
        console.print(f"- {choice.value}: {choice.label}")
