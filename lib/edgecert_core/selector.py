from __future__ import annotations

from typing import Iterable

from .errors import UnreachableDomainError
from .models import CertificateStrategy, Diagnostics, ProxyVerdict, StrategyDecision

PROXIED_CHOICES = (
    CertificateStrategy.MANUAL_ORIGIN_CERTIFICATE,
    CertificateStrategy.PROXIED_LETSENCRYPT_WITH_WARNING,
)


def select(
    verdict: ProxyVerdict,
    reachable: bool | None,
    *,
    domain: str = "",
    expected_ip: str = "",
    actual_ips: Iterable[str] = (),
    diagnostics: Diagnostics | None = None,
) -> StrategyDecision:
    """Map (verdict, reachable) to a certificate strategy decision.

    Proxied domains never consult ``reachable`` and leave the choice between
    an origin certificate and Let's Encrypt to the caller. A direct domain
    that does not resolve to this server raises UnreachableDomainError; the
    keyword arguments only enrich its message.
    """
    if verdict is ProxyVerdict.PROXIED_BY_KNOWN_CDN:
        return StrategyDecision(verdict=verdict, strategy=None, choices=PROXIED_CHOICES)
    if reachable:
        strategy = CertificateStrategy.DIRECT_LETSENCRYPT
        return StrategyDecision(verdict=verdict, strategy=strategy, choices=(strategy,))
    raise UnreachableDomainError(
        domain or "<domain>",
        expected_ip or "<server ip>",
        actual_ips,
        diagnostics=diagnostics,
    )
