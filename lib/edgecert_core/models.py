from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ProxyVerdict(str, Enum):
    DIRECT_NOT_PROXIED = "direct"
    PROXIED_BY_KNOWN_CDN = "proxied"


class CertificateStrategy(str, Enum):
    DIRECT_LETSENCRYPT = "letsencrypt"
    MANUAL_ORIGIN_CERTIFICATE = "origin"
    PROXIED_LETSENCRYPT_WITH_WARNING = "proxied-letsencrypt"

    @property
    def label(self) -> str:
        return _STRATEGY_LABELS[self]


_STRATEGY_LABELS = {
    CertificateStrategy.DIRECT_LETSENCRYPT: "Let's Encrypt (HTTP-01)",
    CertificateStrategy.MANUAL_ORIGIN_CERTIFICATE: "CDN origin certificate (recommended)",
    CertificateStrategy.PROXIED_LETSENCRYPT_WITH_WARNING: "Let's Encrypt (requires temporarily disabling the CDN proxy)",
}


@dataclass(frozen=True)
class DomainQuery:
    domain: str
    requested_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class DnsSnapshot:
    nameservers: frozenset[str] = frozenset()
    a_records: frozenset[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not self.nameservers and not self.a_records

    def to_dict(self) -> dict[str, Any]:
        return {
            "nameservers": sorted(self.nameservers),
            "a_records": sorted(self.a_records),
        }


@dataclass(frozen=True)
class ServerIdentity:
    public_ip: str
    source: str = "manual"


@dataclass(frozen=True)
class CdnConfig:
    name: str
    nameserver_suffixes: tuple[str, ...]
    ip_ranges: tuple[str, ...]

    def networks(self) -> list[ipaddress.IPv4Network | ipaddress.IPv6Network]:
        return [ipaddress.ip_network(cidr, strict=False) for cidr in self.ip_ranges]


@dataclass(frozen=True)
class StrategyDecision:
    verdict: ProxyVerdict
    strategy: CertificateStrategy | None
    choices: tuple[CertificateStrategy, ...]

    @property
    def needs_choice(self) -> bool:
        return self.strategy is None


@dataclass(frozen=True)
class Diagnostics:
    query: DomainQuery
    snapshot: DnsSnapshot
    server: ServerIdentity
    verdict: ProxyVerdict
    matched_rule: str | None = None
    reachable: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "domain": self.query.domain,
            "requested_at": self.query.requested_at.isoformat(),
            "dns": self.snapshot.to_dict(),
            "server_ip": self.server.public_ip,
            "server_ip_source": self.server.source,
            "verdict": self.verdict.value,
            "matched_rule": self.matched_rule,
            "reachable": self.reachable,
        }
