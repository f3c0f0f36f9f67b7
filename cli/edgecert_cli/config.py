from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from typing import Any

import tomli_w
from platformdirs import user_config_dir

from edgecert_core.public_ip import DEFAULT_SERVICES

APP_NAME = "edgecert"
CONFIG_FILENAME = "config.toml"
ENV_CDN_CONFIG = "EDGECERT_CDN_CONFIG"
ENV_DNS_TIMEOUT = "EDGECERT_DNS_TIMEOUT"

DNS_TIMEOUT_DEFAULT = 5.0
NGINX_SITES_DIR_DEFAULT = "/etc/nginx/sites-available"
NGINX_ENABLED_DIR_DEFAULT = "/etc/nginx/sites-enabled"
ORIGIN_CERT_DIR_DEFAULT = "/etc/nginx/ssl"
LETSENCRYPT_LIVE_DIR_DEFAULT = "/etc/letsencrypt/live"

SETTING_KEYS = (
    "email",
    "dns_timeout_s",
    "public_ip_services",
    "cdn_config_path",
    "nginx_sites_dir",
    "nginx_enabled_dir",
    "origin_cert_dir",
)


@dataclass
class AppConfig:
    email: str = ""
    dns_timeout_s: float = DNS_TIMEOUT_DEFAULT
    public_ip_services: list[str] = field(default_factory=lambda: list(DEFAULT_SERVICES))
    cdn_config_path: str | None = None
    nginx_sites_dir: str = NGINX_SITES_DIR_DEFAULT
    nginx_enabled_dir: str = NGINX_ENABLED_DIR_DEFAULT
    origin_cert_dir: str = ORIGIN_CERT_DIR_DEFAULT
    letsencrypt_live_dir: str = LETSENCRYPT_LIVE_DIR_DEFAULT


def config_path() -> str:
    return f"{user_config_dir(APP_NAME)}/{CONFIG_FILENAME}"


def default_config() -> AppConfig:
    return AppConfig()


def ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)


def _parse_timeout(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        return None
    if timeout <= 0:
        return None
    return timeout


def to_toml(cfg: AppConfig) -> dict[str, Any]:
    return _prune_none(
        {
            "email": cfg.email,
            "dns_timeout_s": cfg.dns_timeout_s,
            "public_ip_services": list(cfg.public_ip_services),
            "cdn_config_path": cfg.cdn_config_path,
            "nginx": {
                "sites_dir": cfg.nginx_sites_dir,
                "enabled_dir": cfg.nginx_enabled_dir,
            },
            "certificates": {
                "origin_cert_dir": cfg.origin_cert_dir,
                "letsencrypt_live_dir": cfg.letsencrypt_live_dir,
            },
        }
    )


def _prune_none(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _prune_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_prune_none(item) for item in value if item is not None]
    return value


def from_toml(data: dict[str, Any]) -> AppConfig:
    cfg = default_config()
    cfg.email = str(data.get("email") or "").strip()

    timeout = _parse_timeout(data.get("dns_timeout_s"))
    if timeout is not None:
        cfg.dns_timeout_s = timeout

    services_raw = data.get("public_ip_services")
    if isinstance(services_raw, list):
        services = [str(s).strip() for s in services_raw if isinstance(s, str) and s.strip()]
        if services:
            cfg.public_ip_services = services

    cdn_path = data.get("cdn_config_path")
    if isinstance(cdn_path, str) and cdn_path.strip():
        cfg.cdn_config_path = cdn_path.strip()

    nginx_raw = data.get("nginx") or {}
    if isinstance(nginx_raw, dict):
        cfg.nginx_sites_dir = str(nginx_raw.get("sites_dir") or cfg.nginx_sites_dir)
        cfg.nginx_enabled_dir = str(nginx_raw.get("enabled_dir") or cfg.nginx_enabled_dir)

    certs_raw = data.get("certificates") or {}
    if isinstance(certs_raw, dict):
        cfg.origin_cert_dir = str(certs_raw.get("origin_cert_dir") or cfg.origin_cert_dir)
        cfg.letsencrypt_live_dir = str(certs_raw.get("letsencrypt_live_dir") or cfg.letsencrypt_live_dir)
    return cfg


def load_config() -> AppConfig:
    path = config_path()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        return from_toml(data)
    except FileNotFoundError:
        return default_config()


def resolve_cdn_config_path(cfg: AppConfig, override: str | None = None) -> str | None:
    if override and override.strip():
        return override.strip()
    env_value = os.getenv(ENV_CDN_CONFIG, "").strip()
    if env_value:
        return env_value
    return cfg.cdn_config_path


def resolve_dns_timeout(cfg: AppConfig) -> float:
    env_value = _parse_timeout(os.getenv(ENV_DNS_TIMEOUT, "").strip() or None)
    if env_value is not None:
        return env_value
    return cfg.dns_timeout_s


def get_setting(cfg: AppConfig, key: str) -> Any:
    k = key.strip().lower()
    if k not in SETTING_KEYS:
        raise KeyError(key)
    return getattr(cfg, k)


def set_setting(cfg: AppConfig, key: str, value: str) -> AppConfig:
    k = key.strip().lower()
    if k not in SETTING_KEYS:
        raise KeyError(key)
    raw = (value or "").strip()
    if k == "dns_timeout_s":
        timeout = _parse_timeout(raw)
        if timeout is None:
            raise ValueError("dns_timeout_s must be a positive number.")
        cfg.dns_timeout_s = timeout
    elif k == "public_ip_services":
        services = [s.strip() for s in raw.split(",") if s.strip()]
        if not services:
            raise ValueError("public_ip_services needs at least one URL.")
        cfg.public_ip_services = services
    elif k == "cdn_config_path":
        cfg.cdn_config_path = raw or None
    else:
        setattr(cfg, k, raw)
    return cfg


def save_config(cfg: AppConfig) -> str:
    path = config_path()
    ensure_parent_dir(path)
    with open(path, "wb") as f:
        f.write(tomli_w.dumps(to_toml(cfg)).encode("utf-8"))
    os.chmod(path, 0o600)
    return path
