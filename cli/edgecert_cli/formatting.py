from __future__ import annotations

from typing import Iterable

from rich.table import Table

from edgecert_core import Diagnostics, ProxyVerdict


def format_values(values: Iterable[str]) -> str:
    items = sorted(values)
    if not items:
        return "-"
    return ", ".join(items)


def format_reachable(value: bool | None) -> str:
    if value is None:
        return "not checked"
    return "yes" if value else "no"


def diagnostics_table(diag: Diagnostics) -> Table:
    table = Table(title=f"DNS diagnostics: {diag.query.domain}", show_header=False)
    table.add_column("field", style="bold")
    table.add_column("value")
    table.add_row("Nameservers", format_values(diag.snapshot.nameservers))
    table.add_row("A records", format_values(diag.snapshot.a_records))
    table.add_row("Server IP", f"{diag.server.public_ip} ({diag.server.source})")
    proxied = diag.verdict is ProxyVerdict.PROXIED_BY_KNOWN_CDN
    table.add_row("CDN proxy", "detected" if proxied else "not detected")
    if diag.matched_rule:
        table.add_row("Matched rule", diag.matched_rule)
    table.add_row("Points here", format_reachable(diag.reachable))
    return table
