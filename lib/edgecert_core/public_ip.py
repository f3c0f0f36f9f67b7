from __future__ import annotations

import ipaddress
import logging
from typing import Sequence

import httpx

from .errors import ConfigurationError, ResolutionError
from .models import ServerIdentity

DEFAULT_SERVICES = (
    "https://ifconfig.me/ip",
    "https://icanhazip.com",
    "https://ipecho.net/plain",
)
DEFAULT_TIMEOUT_S = 5.0
USER_AGENT = "edgecert/0.1.0"

logger = logging.getLogger(__name__)


def parse_ipv4(text: str) -> str | None:
    value = (text or "").strip()
    try:
        return str(ipaddress.IPv4Address(value))
    except ValueError:
        return None


def validate_server_ip(raw: str, *, source: str = "manual") -> ServerIdentity:
    value = (raw or "").strip()
    try:
        addr = ipaddress.ip_address(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid server IP address: {raw!r}") from exc
    # only A records are compared
    if not isinstance(addr, ipaddress.IPv4Address):
        raise ConfigurationError(f"Server IP must be an IPv4 address, got {raw!r}.")
    return ServerIdentity(public_ip=str(addr), source=source)


def _make_client(timeout: float) -> httpx.Client:
    # Bind to 0.0.0.0 so the services report the IPv4 address.
    transport = httpx.HTTPTransport(local_address="0.0.0.0")
    return httpx.Client(
        transport=transport,
        timeout=timeout,
        headers={"User-Agent": USER_AGENT},
        follow_redirects=True,
    )


def discover_public_ip(
    services: Sequence[str] = DEFAULT_SERVICES,
    *,
    timeout: float = DEFAULT_TIMEOUT_S,
    client: httpx.Client | None = None,
) -> ServerIdentity:
    """Ask the discovery services in order for this host's public IPv4."""
    if not services:
        raise ConfigurationError("No public IP discovery services configured.")
    own_client = client is None
    http = client or _make_client(timeout)
    failures: list[str] = []
    try:
        for url in services:
            try:
                r = http.get(url)
            except httpx.HTTPError as exc:
                logger.debug("Public IP lookup via %s failed: %s", url, exc)
                failures.append(f"{url}: {exc}")
                continue
            if r.status_code >= 400:
                failures.append(f"{url}: HTTP {r.status_code}")
                continue
            ip = parse_ipv4(r.text)
            if not ip:
                failures.append(f"{url}: unexpected response {r.text[:40]!r}")
                continue
            logger.debug("Public IP %s from %s", ip, url)
            return ServerIdentity(public_ip=ip, source=url)
    finally:
        if own_client:
            http.close()
    raise ResolutionError(
        "public-ip",
        "Could not determine the server's public IPv4 address (" + "; ".join(failures) + ").",
    )
