from __future__ import annotations

import logging
import re

import dns.exception
import dns.resolver

from .errors import InvalidDomainError, ResolutionError
from .models import DnsSnapshot

DEFAULT_TIMEOUT_S = 5.0
MAX_DOMAIN_LENGTH = 253

_LABEL_RE = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")
_TLD_RE = re.compile(r"^[a-z]{2,63}$")

logger = logging.getLogger(__name__)


def validate_domain(raw: str) -> str:
    value = (raw or "").strip().lower()
    if value.endswith("."):
        value = value[:-1]
    if not value:
        raise InvalidDomainError(raw or "", "domain cannot be empty")
    if len(value) > MAX_DOMAIN_LENGTH:
        raise InvalidDomainError(raw, f"longer than {MAX_DOMAIN_LENGTH} characters")
    labels = value.split(".")
    if len(labels) < 2:
        raise InvalidDomainError(raw, "expected at least two labels (e.g. app.example.com)")
    for label in labels:
        if not _LABEL_RE.match(label):
            raise InvalidDomainError(raw, f"label {label!r} must be 1-63 letters, digits or hyphens")
    if not _TLD_RE.match(labels[-1]):
        raise InvalidDomainError(raw, f"top-level label {labels[-1]!r} must be at least two letters")
    return value


def make_resolver(timeout: float = DEFAULT_TIMEOUT_S) -> dns.resolver.Resolver:
    try:
        resolver = dns.resolver.Resolver(configure=True)
    except dns.resolver.NoResolverConfiguration as exc:
        raise ResolutionError("resolver", f"System DNS resolver is not configured: {exc}") from exc
    resolver.timeout = float(timeout)
    resolver.lifetime = float(timeout)
    return resolver


def _query(resolver: dns.resolver.Resolver, name: str, rdtype: str) -> tuple[list[str], bool]:
    """Return (values, name_exists) for one record type."""
    try:
        answer = resolver.resolve(name, rdtype, raise_on_no_answer=False)
    except dns.resolver.NXDOMAIN:
        logger.debug("%s %s: NXDOMAIN", rdtype, name)
        return [], False
    except dns.resolver.NoAnswer:
        return [], True
    except dns.exception.Timeout as exc:
        raise ResolutionError(name, f"Timed out querying {rdtype} for {name}.") from exc
    except dns.resolver.NoNameservers as exc:
        raise ResolutionError(name, f"No nameserver answered the {rdtype} query for {name}: {exc}") from exc
    except dns.exception.DNSException as exc:
        raise ResolutionError(name, f"Failed querying {rdtype} for {name}: {type(exc).__name__}: {exc}") from exc

    values: list[str] = []
    if answer.rrset is None:
        return values, True
    for rdata in answer.rrset:
        if rdtype == "NS":
            values.append(str(rdata.target).rstrip(".").lower())
        else:
            values.append(rdata.to_text())
    logger.debug("%s %s: %s", rdtype, name, values)
    return values, True


def resolve(
    domain: str,
    *,
    timeout: float = DEFAULT_TIMEOUT_S,
    resolver: dns.resolver.Resolver | None = None,
) -> DnsSnapshot:
    """Take a fresh NS + A snapshot of ``domain``.

    Missing records are returned as empty sets. Only transport failures raise
    ResolutionError. A subdomain without its own NS set borrows the NS set of
    the closest enclosing zone.
    """
    resolver = resolver or make_resolver(timeout)
    a_records, exists = _query(resolver, domain, "A")
    if not exists:
        return DnsSnapshot()

    nameservers, _ = _query(resolver, domain, "NS")
    labels = domain.split(".")
    idx = 1
    while not nameservers and idx <= len(labels) - 2:
        parent = ".".join(labels[idx:])
        nameservers, _ = _query(resolver, parent, "NS")
        if nameservers:
            logger.debug("NS for %s taken from enclosing zone %s", domain, parent)
        idx += 1

    return DnsSnapshot(nameservers=frozenset(nameservers), a_records=frozenset(a_records))
