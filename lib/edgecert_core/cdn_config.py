from __future__ import annotations

import ipaddress
import tomllib
from importlib import resources
from typing import Any

from .errors import ConfigurationError
from .models import CdnConfig

DEFAULT_CDN_RESOURCE = "cdn.toml"


def from_toml(data: dict[str, Any], *, source: str = "<memory>") -> CdnConfig:
    name = str(data.get("name") or "cdn").strip() or "cdn"
    suffixes_raw = data.get("nameserver_suffixes") or []
    ranges_raw = data.get("ip_ranges") or []
    if not isinstance(suffixes_raw, list) or not isinstance(ranges_raw, list):
        raise ConfigurationError(f"CDN config {source}: nameserver_suffixes and ip_ranges must be lists.")

    suffixes: list[str] = []
    for item in suffixes_raw:
        value = str(item or "").strip().lower().strip(".")
        if value and value not in suffixes:
            suffixes.append(value)

    ranges: list[str] = []
    for item in ranges_raw:
        value = str(item or "").strip()
        if not value:
            continue
        try:
            ipaddress.ip_network(value, strict=False)
        except ValueError as exc:
            raise ConfigurationError(f"CDN config {source}: invalid CIDR {value!r} ({exc}).") from exc
        ranges.append(value)

    if not suffixes and not ranges:
        raise ConfigurationError(f"CDN config {source} defines no nameserver suffixes and no IP ranges.")
    return CdnConfig(name=name, nameserver_suffixes=tuple(suffixes), ip_ranges=tuple(ranges))


def load_cdn_config(path: str | None = None) -> CdnConfig:
    """Load the CDN allow-lists.

    Without a path the packaged Cloudflare table is used. A user file replaces
    it entirely; ranges are not merged.
    """
    if not path:
        raw = resources.files("edgecert_core.data").joinpath(DEFAULT_CDN_RESOURCE).read_bytes()
        return from_toml(tomllib.loads(raw.decode("utf-8")), source=DEFAULT_CDN_RESOURCE)
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError as exc:
        raise ConfigurationError(f"CDN config not found: {path}") from exc
    except OSError as exc:
        raise ConfigurationError(f"CDN config {path} could not be read: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"CDN config {path} is not valid TOML: {exc}") from exc
    return from_toml(data, source=path)
