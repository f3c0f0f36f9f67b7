from __future__ import annotations

import os
from dataclasses import dataclass

from .apps import DEFAULT_PROXY_HOST, AppProfile
from .config import AppConfig
from .shell import ExecContext

CLOUDFLARE_SSL_CIPHERS = ":".join(
    [
        "ECDHE-ECDSA-AES128-GCM-SHA256",
        "ECDHE-RSA-AES128-GCM-SHA256",
        "ECDHE-ECDSA-AES256-GCM-SHA384",
        "ECDHE-RSA-AES256-GCM-SHA384",
        "ECDHE-ECDSA-CHACHA20-POLY1305",
        "ECDHE-RSA-CHACHA20-POLY1305",
        "DHE-RSA-AES128-GCM-SHA256",
        "DHE-RSA-AES256-GCM-SHA384",
    ]
)


@dataclass(frozen=True)
class SitePaths:
    available: str
    enabled: str
    default_enabled: str


def site_paths(cfg: AppConfig, domain: str) -> SitePaths:
    filename = f"{domain}.conf"
    return SitePaths(
        available=os.path.join(cfg.nginx_sites_dir, filename),
        enabled=os.path.join(cfg.nginx_enabled_dir, filename),
        default_enabled=os.path.join(cfg.nginx_enabled_dir, "default"),
    )


def _location_block(app: AppProfile) -> list[str]:
    lines = [
        "    location / {",
        f"        proxy_pass http://{DEFAULT_PROXY_HOST}:{app.port};",
        "        proxy_http_version 1.1;",
    ]
    if app.websocket:
        lines += [
            "        proxy_set_header Upgrade $http_upgrade;",
            "        proxy_set_header Connection 'upgrade';",
        ]
    lines += [
        "        proxy_set_header Host $host;",
        "        proxy_set_header X-Real-IP $remote_addr;",
        "        proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;",
        "        proxy_set_header X-Forwarded-Proto $scheme;",
        "    }",
    ]
    return lines


def render_http_site(domain: str, app: AppProfile) -> str:
    """Plain port-80 proxy; certbot --nginx rewrites it for TLS."""
    return "\n".join(
        [
            "server {",
            "    listen 80;",
            f"    server_name {domain};",
            "",
            *_location_block(app),
            "}",
            "",
        ]
    )


def render_tls_site(domain: str, app: AppProfile, cert_path: str, key_path: str) -> str:
    return "\n".join(
        [
            "server {",
            "    listen 443 ssl http2;",
            f"    server_name {domain};",
            "",
            f"    ssl_certificate {cert_path};",
            f"    ssl_certificate_key {key_path};",
            "    ssl_protocols TLSv1.2 TLSv1.3;",
            f"    ssl_ciphers {CLOUDFLARE_SSL_CIPHERS};",
            "    ssl_prefer_server_ciphers off;",
            "",
            *_location_block(app),
            "}",
            "",
            "server {",
            "    listen 80;",
            f"    server_name {domain};",
            "    return 301 https://$host$request_uri;",
            "}",
            "",
        ]
    )


def install_site(ctx: ExecContext, cfg: AppConfig, domain: str, content: str) -> SitePaths:
    paths = site_paths(cfg, domain)
    ctx.write_file(paths.available, content, mode=0o644)
    ctx.symlink(paths.available, paths.enabled)
    ctx.remove(paths.default_enabled)
    return paths


def check_and_restart(ctx: ExecContext) -> None:
    ctx.run_checked(["nginx", "-t"], label="nginx config test")
    ctx.run_checked(["systemctl", "restart", "nginx"], label="restart nginx")
