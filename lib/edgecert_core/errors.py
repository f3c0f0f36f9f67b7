from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from .models import Diagnostics


class EdgecertError(Exception):
    """Base resolver error."""


class ConfigurationError(EdgecertError, ValueError):
    """Invalid input rejected before any network call."""


class InvalidDomainError(ConfigurationError):
    def __init__(self, domain: str, reason: str):
        super().__init__(f"Invalid domain {domain!r}: {reason}")
        self.domain = domain
        self.reason = reason


class ResolutionError(EdgecertError):
    """DNS or public-IP lookup failed at the transport level."""

    def __init__(self, target: str, message: str):
        super().__init__(message)
        self.target = target


class UnreachableDomainError(EdgecertError):
    def __init__(
        self,
        domain: str,
        expected_ip: str,
        actual_ips: Iterable[str],
        diagnostics: Diagnostics | None = None,
    ):
        self.domain = domain
        self.expected_ip = expected_ip
        self.actual_ips = sorted(actual_ips)
        self.diagnostics = diagnostics
        if self.actual_ips:
            actual = ", ".join(self.actual_ips)
            message = f"Domain {domain} resolves to {actual}, expected {expected_ip}. Update the A record and re-run."
        else:
            message = (
                f"Domain {domain} does not resolve to any IP address, expected {expected_ip}. "
                "Create an A record and re-run."
            )
        super().__init__(message)
