from __future__ import annotations

import ipaddress
import logging

from .models import CdnConfig, DnsSnapshot, ProxyVerdict

logger = logging.getLogger(__name__)


def _matches_suffix(nameserver: str, suffix: str) -> bool:
    ns = nameserver.strip().lower().rstrip(".")
    return ns == suffix or ns.endswith(f".{suffix}")


def _matching_nameserver(snapshot: DnsSnapshot, cdn: CdnConfig) -> str | None:
    for ns in sorted(snapshot.nameservers):
        for suffix in cdn.nameserver_suffixes:
            if _matches_suffix(ns, suffix):
                return f"nameserver {ns} matches *.{suffix}"
    return None


def _matching_ip(snapshot: DnsSnapshot, cdn: CdnConfig) -> str | None:
    networks = cdn.networks()
    for ip in sorted(snapshot.a_records):
        try:
            addr = ipaddress.ip_address(ip)
        except ValueError:
            continue
        for net in networks:
            if addr.version == net.version and addr in net:
                return f"address {ip} in {net}"
    return None


def classify_with_reason(snapshot: DnsSnapshot, cdn: CdnConfig) -> tuple[ProxyVerdict, str | None]:
    rule = _matching_nameserver(snapshot, cdn)
    if rule:
        logger.debug("%s proxy detected by nameserver rule: %s", cdn.name, rule)
        return ProxyVerdict.PROXIED_BY_KNOWN_CDN, rule
    rule = _matching_ip(snapshot, cdn)
    if rule:
        logger.debug("%s proxy detected by IP range rule: %s", cdn.name, rule)
        return ProxyVerdict.PROXIED_BY_KNOWN_CDN, rule
    logger.debug("No %s signal in %s", cdn.name, snapshot.to_dict())
    return ProxyVerdict.DIRECT_NOT_PROXIED, None


def classify(snapshot: DnsSnapshot, cdn: CdnConfig) -> ProxyVerdict:
    verdict, _ = classify_with_reason(snapshot, cdn)
    return verdict
