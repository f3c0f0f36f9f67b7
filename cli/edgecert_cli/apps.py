from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PROXY_HOST = "127.0.0.1"


@dataclass(frozen=True)
class AppProfile:
    name: str
    port: int
    description: str
    websocket: bool = True
    health_path: str | None = None


APP_PROFILES: dict[str, AppProfile] = {
    "n8n": AppProfile(
        name="n8n",
        port=5678,
        description="n8n workflow automation",
    ),
    "crawl4ai": AppProfile(
        name="crawl4ai",
        port=11235,
        description="Crawl4AI web crawling API",
        health_path="/health",
    ),
}


def resolve_app(name: str | None, port: int | None) -> AppProfile:
    """Pick the upstream the site proxies to. An explicit port wins over the profile's."""
    if name:
        key = name.strip().lower()
        profile = APP_PROFILES.get(key)
        if profile is None:
            known = ", ".join(sorted(APP_PROFILES))
            raise ValueError(f"Unknown app '{name}'. Known apps: {known}.")
        if port is not None:
            return AppProfile(
                name=profile.name,
                port=_check_port(port),
                description=profile.description,
                websocket=profile.websocket,
                health_path=profile.health_path,
            )
        return profile
    if port is None:
        raise ValueError("Provide --app or --port for the upstream service.")
    return AppProfile(name="custom", port=_check_port(port), description="Custom upstream")


def _check_port(port: int) -> int:
    if not 1 <= int(port) <= 65535:
        raise ValueError(f"Port must be between 1 and 65535, got {port}.")
    return int(port)
