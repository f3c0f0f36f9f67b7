from __future__ import annotations

from .models import DnsSnapshot, ServerIdentity


def is_reachable(snapshot: DnsSnapshot, server: ServerIdentity) -> bool:
    # Only meaningful for domains classified as not proxied.
    return server.public_ip in snapshot.a_records
