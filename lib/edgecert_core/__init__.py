from .cdn_config import load_cdn_config
from .errors import (
    ConfigurationError,
    EdgecertError,
    InvalidDomainError,
    ResolutionError,
    UnreachableDomainError,
)
from .models import (
    CdnConfig,
    CertificateStrategy,
    Diagnostics,
    DnsSnapshot,
    DomainQuery,
    ProxyVerdict,
    ServerIdentity,
    StrategyDecision,
)
from .resolver import resolve_certificate_strategy

__all__ = [
    "CdnConfig",
    "CertificateStrategy",
    "ConfigurationError",
    "Diagnostics",
    "DnsSnapshot",
    "DomainQuery",
    "EdgecertError",
    "InvalidDomainError",
    "ProxyVerdict",
    "ResolutionError",
    "ServerIdentity",
    "StrategyDecision",
    "UnreachableDomainError",
    "load_cdn_config",
    "resolve_certificate_strategy",
]
