from __future__ import annotations

import logging
from typing import Callable

from . import dns_inspector
from .classifier import classify_with_reason
from .errors import ConfigurationError
from .models import CdnConfig, Diagnostics, DnsSnapshot, DomainQuery, ProxyVerdict, ServerIdentity, StrategyDecision
from .public_ip import validate_server_ip
from .reachability import is_reachable
from .selector import select

Inspector = Callable[..., DnsSnapshot]

logger = logging.getLogger(__name__)


def resolve_certificate_strategy(
    domain: str,
    server_public_ip: str | ServerIdentity,
    cdn_config: CdnConfig | None,
    *,
    timeout: float = dns_inspector.DEFAULT_TIMEOUT_S,
    inspector: Inspector | None = None,
) -> tuple[StrategyDecision, Diagnostics]:
    """Decide how to obtain a certificate for ``domain`` on this server.

    Inputs are validated before any DNS traffic. Raises ConfigurationError,
    ResolutionError or UnreachableDomainError; nothing is downgraded.
    """
    query = DomainQuery(domain=dns_inspector.validate_domain(domain))
    if isinstance(server_public_ip, ServerIdentity):
        server = validate_server_ip(server_public_ip.public_ip, source=server_public_ip.source)
    else:
        server = validate_server_ip(server_public_ip)
    if cdn_config is None or not (cdn_config.nameserver_suffixes or cdn_config.ip_ranges):
        raise ConfigurationError("CDN allow-lists are missing; provide nameserver suffixes or IP ranges.")

    inspect = inspector or dns_inspector.resolve
    snapshot = inspect(query.domain, timeout=timeout)
    logger.debug("DNS snapshot for %s: %s", query.domain, snapshot.to_dict())

    verdict, rule = classify_with_reason(snapshot, cdn_config)
    reachable: bool | None = None
    if verdict is ProxyVerdict.DIRECT_NOT_PROXIED:
        reachable = is_reachable(snapshot, server)

    diagnostics = Diagnostics(
        query=query,
        snapshot=snapshot,
        server=server,
        verdict=verdict,
        matched_rule=rule,
        reachable=reachable,
    )
    decision = select(
        verdict,
        reachable,
        domain=query.domain,
        expected_ip=server.public_ip,
        actual_ips=snapshot.a_records,
        diagnostics=diagnostics,
    )
    return decision, diagnostics
