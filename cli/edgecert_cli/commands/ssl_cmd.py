from __future__ import annotations

from pathlib import Path

import typer

from edgecert_core import (
    CertificateStrategy,
    EdgecertError,
    UnreachableDomainError,
    resolve_certificate_strategy,
)

from .. import console, interactive
from ..apps import AppProfile, resolve_app
from ..certificates import (
    IssuedCertificate,
    has_letsencrypt_certificate,
    has_origin_certificate,
    issue_certificate,
    letsencrypt_paths,
    origin_paths,
    validate_email,
)
from ..config import AppConfig, load_config, resolve_dns_timeout
from ..formatting import diagnostics_table
from ..nginx import check_and_restart, install_site, render_http_site, render_tls_site
from ..shell import ExecContext, SetupError, is_root, tail
from .domain_cmd import cdn_config, report_resolver_error, server_identity

app = typer.Typer(help="Obtain TLS certificates and configure the nginx site.")


def choose_strategy(
        decision_strategy: CertificateStrategy | None,
        choices: tuple[CertificateStrategy, ...],
        requested: CertificateStrategy | None,
) -> CertificateStrategy:
    if requested is not None:
        if requested not in choices:
            allowed = ", ".join(choice.value for choice in choices)
            raise ValueError(f"Strategy '{requested.value}' does not apply to this domain. Allowed: {allowed}.")
        return requested
    if decision_strategy is not None:
        return decision_strategy
    if not interactive.is_interactive():
        allowed = ", ".join(choice.value for choice in choices)
        raise ValueError(f"CDN proxy detected; pass --strategy ({allowed}) in non-interactive mode.")
    return interactive.select_strategy(choices)


def _should_replace(message: str, *, force: bool) -> bool:
    if force:
        return True
    if not interactive.is_interactive():
        return False
    return interactive.confirm_choice(message, default=False)


def _read_pem(label: str, path: str | None) -> str:
    if path:
        try:
            return Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise ValueError(f"Cannot read {label} file {path}: {exc}") from exc
    if not interactive.is_interactive():
        raise ValueError(f"No {label} provided; pass it as a file in non-interactive mode.")
    return interactive.read_pem_block(label)


def apply_letsencrypt(
        ctx: ExecContext,
        cfg: AppConfig,
        domain: str,
        profile: AppProfile,
        strategy: CertificateStrategy,
        email: str,
        *,
        force: bool,
) -> IssuedCertificate:
    replacing = False
    if has_letsencrypt_certificate(cfg, domain):
        console.info(f"Found existing Let's Encrypt certificate for {domain}.")
        if not _should_replace("Renew/replace the existing certificate?", force=force):
            console.info("Using existing Let's Encrypt certificate.")
            fullchain, privkey = letsencrypt_paths(cfg, domain)
            install_site(ctx, cfg, domain, render_tls_site(domain, profile, fullchain, privkey))
            check_and_restart(ctx)
            return IssuedCertificate(strategy=strategy, cert_path=fullchain, key_path=privkey, reused=True)
        replacing = True

    console.info("Writing nginx HTTP site...")
    install_site(ctx, cfg, domain, render_http_site(domain, profile))
    check_and_restart(ctx)

    if strategy is CertificateStrategy.PROXIED_LETSENCRYPT_WITH_WARNING:
        console.warn(
            "The CDN proxy blocks the HTTP-01 challenge. Switch the DNS record to DNS-only "
            "(grey cloud) before continuing."
        )
        if interactive.is_interactive() and not ctx.dry_run:
            interactive.wait_for_enter("Press Enter when the proxy is disabled")

    console.info("Requesting Let's Encrypt certificate...")
    issued = issue_certificate(ctx, cfg, strategy, domain, email=email, force_renewal=replacing)
    if strategy is CertificateStrategy.PROXIED_LETSENCRYPT_WITH_WARNING:
        console.info("You can re-enable the CDN proxy now. Renewals need it disabled again.")
    return issued


def apply_origin_certificate(
        ctx: ExecContext,
        cfg: AppConfig,
        domain: str,
        profile: AppProfile,
        *,
        cert_path: str | None,
        key_path: str | None,
        cert_file: str | None,
        key_file: str | None,
        force: bool,
) -> IssuedCertificate:
    default_cert, default_key = origin_paths(cfg, domain)
    cert_path = cert_path or default_cert
    key_path = key_path or default_key

    if has_origin_certificate(cert_path, key_path) and not (cert_file or key_file):
        console.info(f"Found existing origin certificate at {cert_path}.")
        if not _should_replace("Replace the existing certificate and key?", force=force):
            console.info("Using existing origin certificate.")
            install_site(ctx, cfg, domain, render_tls_site(domain, profile, cert_path, key_path))
            check_and_restart(ctx)
            return IssuedCertificate(
                strategy=CertificateStrategy.MANUAL_ORIGIN_CERTIFICATE,
                cert_path=cert_path,
                key_path=key_path,
                reused=True,
            )

    if not cert_file and interactive.is_interactive():
        console.print("Create the certificate in your CDN dashboard:")
        console.print("1. SSL/TLS > Origin Server > Create Certificate")
        console.print("2. Keep the default validity (15 years)")
        console.print("3. Copy the certificate and the private key")
    cert_pem = _read_pem("certificate", cert_file)
    key_pem = _read_pem("private key", key_file)
    issued = issue_certificate(
        ctx,
        cfg,
        CertificateStrategy.MANUAL_ORIGIN_CERTIFICATE,
        domain,
        cert_pem=cert_pem,
        key_pem=key_pem,
        cert_path=cert_path,
        key_path=key_path,
    )
    if issued.not_after:
        console.info(f"Origin certificate valid until {issued.not_after:%Y-%m-%d}.")

    console.info("Writing nginx TLS site...")
    install_site(ctx, cfg, domain, render_tls_site(domain, profile, cert_path, key_path))
    check_and_restart(ctx)
    return issued


def report_setup_failure(exc: Exception) -> None:
    console.err(f"SSL setup failed: {exc}")
    if isinstance(exc, SetupError):
        stdout = tail(exc.stdout)
        stderr = tail(exc.stderr)
        if stdout:
            console.err(f"Last stdout:\n{stdout}")
        if stderr:
            console.err(f"Last stderr:\n{stderr}")
    console.info("Useful checks:")
    console.print("- nginx -t")
    console.print("- journalctl -u nginx --no-pager -n 100")
    console.print("- certbot certificates")


@app.command("setup")
def ssl_setup(
        domain: str = typer.Option(..., "--domain", help="Domain for HTTPS (e.g. n8n.example.com)."),
        email: str | None = typer.Option(None, "--email", help="Email for Let's Encrypt registration."),
        app_name: str | None = typer.Option(None, "--app", help="Upstream app profile (n8n, crawl4ai)."),
        port: int | None = typer.Option(None, "--port", help="Local upstream port (overrides the app profile)."),
        strategy: CertificateStrategy | None = typer.Option(
            None,
            "--strategy",
            case_sensitive=False,
            help="Certificate strategy for CDN-proxied domains.",
        ),
        server_ip: str | None = typer.Option(None, "--server-ip", help="Public IP of this server."),
        cdn_config_path: str | None = typer.Option(None, "--cdn-config", help="CDN allow-list TOML file."),
        allow_dns_mismatch: bool = typer.Option(
            False,
            "--allow-dns-mismatch",
            help="Continue with Let's Encrypt when DNS does not point to this server.",
        ),
        cert_path: str | None = typer.Option(None, "--cert-path", help="Where to store the origin certificate."),
        key_path: str | None = typer.Option(None, "--key-path", help="Where to store the origin private key."),
        cert_file: str | None = typer.Option(None, "--cert-file", help="Origin certificate PEM to install."),
        key_file: str | None = typer.Option(None, "--key-file", help="Origin private key PEM to install."),
        force: bool = typer.Option(False, "--force", help="Replace existing certificates."),
        dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be done."),
):
    """Resolve the certificate strategy for a domain and apply it.

    Examples:
      edgecert ssl setup --domain n8n.example.com --email admin@example.com --app n8n
      edgecert ssl setup --domain api.example.com --app crawl4ai --strategy origin \\
        --cert-file origin.pem --key-file origin.key
    """
    cfg = load_config()
    try:
        profile = resolve_app(app_name, port)
        resolved_email = (email or cfg.email or "").strip()
        if resolved_email:
            resolved_email = validate_email(resolved_email)
    except ValueError as exc:
        console.err(str(exc))
        raise typer.Exit(code=2)

    if not dry_run and not is_root():
        console.err("SSL setup writes to /etc/nginx and runs certbot; run it as root.")
        raise typer.Exit(code=2)

    console.info("Checking DNS configuration...")
    decision_strategy: CertificateStrategy | None
    try:
        cdn = cdn_config(cfg, cdn_config_path)
        server = server_identity(cfg, server_ip)
        console.info(f"Server public IP: {server.public_ip}")
        decision, diagnostics = resolve_certificate_strategy(
            domain,
            server,
            cdn,
            timeout=resolve_dns_timeout(cfg),
        )
        clean_domain = diagnostics.query.domain
        decision_strategy = decision.strategy
        choices = decision.choices
        console.print(diagnostics_table(diagnostics))
    except UnreachableDomainError as exc:
        if exc.diagnostics:
            console.print(diagnostics_table(exc.diagnostics))
        report_resolver_error(exc)
        proceed = allow_dns_mismatch or (
            interactive.is_interactive()
            and interactive.confirm_choice("DNS does not point to this server. Proceed anyway?", default=False)
        )
        if not proceed:
            console.info("Update your DNS records and re-run.")
            raise typer.Exit(code=2)
        console.warn("Proceeding despite DNS mismatch; certbot will fail until DNS points here.")
        clean_domain = exc.domain
        decision_strategy = CertificateStrategy.DIRECT_LETSENCRYPT
        choices = (CertificateStrategy.DIRECT_LETSENCRYPT,)
    except (EdgecertError, ValueError) as exc:
        report_resolver_error(exc)
        raise typer.Exit(code=2)

    try:
        chosen = choose_strategy(decision_strategy, choices, strategy)
        if chosen is not CertificateStrategy.MANUAL_ORIGIN_CERTIFICATE and not resolved_email:
            raise ValueError("Email is required for Let's Encrypt; pass --email or set it with `edgecert settings set email ...`.")
        console.info(f"Certificate strategy: {chosen.label}")

        ctx = ExecContext(dry_run=dry_run)
        if chosen is CertificateStrategy.MANUAL_ORIGIN_CERTIFICATE:
            issued = apply_origin_certificate(
                ctx,
                cfg,
                clean_domain,
                profile,
                cert_path=cert_path,
                key_path=key_path,
                cert_file=cert_file,
                key_file=key_file,
                force=force,
            )
        else:
            issued = apply_letsencrypt(ctx, cfg, clean_domain, profile, chosen, resolved_email, force=force)
    except (SetupError, ValueError) as exc:
        report_setup_failure(exc)
        raise typer.Exit(code=2)

    if dry_run:
        console.rule("Dry run")
        for action in ctx.planned:
            console.print(f"- {action}")
        for path, content in ctx.planned_files.items():
            if path.endswith(".conf"):
                console.rule(path)
                console.print(content, markup=False, highlight=False)
        return

    console.ok(f"SSL configured ({issued.strategy.value}). Certificate: {issued.cert_path}")
    console.ok(f"Site available at https://{clean_domain}")
    if profile.health_path:
        console.info(f"Health check: curl -fsS https://{clean_domain}{profile.health_path}")
