# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Command-line interface for the inquiry service.

Usage:
    inquiry-service serve --port 8000
    inquiry-service init-db
    inquiry-service check-config
    inquiry-service submit --name "Asha" --company "Acme" \\
        --email asha@acme.test --phone "+91 98765 43210" \\
        --requirement "Rooftop solar, 40 kW"
    inquiry-service show <inquiry-id>

Every command reads the same settings as the server (see
:mod:`inquiry_service.config_loader`); ``--config`` points at an INI file.

Exit codes of ``submit``: 0 stored and notified, 2 stored but not notified,
1 not stored.
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from .config_loader import CONFIG_ENV_VAR, ServiceConfig, load_settings
from .errors import ConfigError, StorageUnavailable, ValidationError
from .logger import configure_logging
from .models import SubmissionOutcome
from .server import build_services

console = Console()
err_console = Console(stderr=True)

EXIT_PARTIAL = 2


def run_async(coro):
    """Run an async coroutine synchronously."""
    return asyncio.run(coro)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[red]Error:[/red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def print_json(data: Any) -> None:
    """Print data as formatted JSON."""
    console.print_json(json.dumps(data, indent=2, default=str))


def _settings(ctx: click.Context) -> ServiceConfig:
    return ctx.obj["settings"]


def _mask(value: str | None) -> str:
    if not value:
        return "[red]missing[/red]"
    return "*" * 8


@click.group()
@click.version_option(package_name="inquiry-service")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="INI configuration file (default: $INQUIRY_CONFIG or config.ini).")
@click.pass_context
def main(ctx: click.Context, config_path: str | None) -> None:
    """Store contact-form inquiries and notify the operator by email."""
    settings = load_settings(config_path)
    configure_logging(settings.log_level)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["config_path"] = config_path


@main.command()
@click.option("--host", "-h", default=None, help="Host to bind to (default from settings).")
@click.option("--port", "-p", type=int, default=None, help="Port to listen on (default from settings).")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development.")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, reload: bool) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = _settings(ctx)
    try:
        settings.require_database_url()
    except ConfigError as exc:
        print_error(str(exc))
        sys.exit(1)

    # The factory runs in the server process and reloads the same file
    if ctx.obj.get("config_path"):
        os.environ[CONFIG_ENV_VAR] = ctx.obj["config_path"]
    uvicorn.run(
        "inquiry_service.server:create_server_app",
        factory=True,
        host=host or settings.http_host,
        port=port or settings.http_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@main.command("init-db")
@click.pass_context
def init_db(ctx: click.Context) -> None:
    """Create the inquiries table if it does not exist."""
    try:
        services = build_services(_settings(ctx))
    except ConfigError as exc:
        print_error(str(exc))
        sys.exit(1)

    async def _run() -> None:
        await services.store.init_db()
        await services.store.close()

    try:
        run_async(_run())
    except StorageUnavailable as exc:
        print_error(str(exc))
        sys.exit(1)
    print_success("Inquiry storage initialised")


@main.command("check-config")
@click.pass_context
def check_config(ctx: click.Context) -> None:
    """Show the resolved configuration and whether email is enabled."""
    settings = _settings(ctx)
    mail = settings.mail

    table = Table(title="Inquiry service configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("DATABASE_URL", "set" if settings.database_url else "[red]missing[/red]")
    table.add_row("SMTP_HOST", mail.host or "[red]missing[/red]")
    table.add_row("SMTP_PORT", str(mail.port) if mail.port else "[red]missing[/red]")
    table.add_row("SMTP_USER", mail.user or "[red]missing[/red]")
    table.add_row("SMTP_PASS", _mask(mail.password))
    table.add_row("ADMIN_EMAIL", mail.admin_email or "[red]missing[/red]")
    table.add_row("CC_EMAIL", ", ".join(mail.cc_emails) or "none")
    table.add_row("TLS", "implicit (465)" if mail.port == 465 else "STARTTLS when offered")
    table.add_row("Certificates", "verified" if mail.production else "not verified")
    table.add_row("Time zone", mail.timezone)
    console.print(table)

    problems = mail.missing_options() + mail.invalid_options()
    if problems:
        console.print(f"[yellow]Email notifications disabled[/yellow] (missing or invalid: {', '.join(problems)})")
    else:
        print_success("Email notifications enabled")


@main.command()
@click.option("--name", required=True)
@click.option("--company", required=True)
@click.option("--email", required=True)
@click.option("--phone", required=True)
@click.option("--requirement", required=True, help="Free text; use \\n for line breaks.")
@click.pass_context
def submit(ctx: click.Context, name: str, company: str, email: str, phone: str, requirement: str) -> None:
    """Run one submission through the full pipeline."""
    try:
        services = build_services(_settings(ctx))
    except ConfigError as exc:
        print_error(str(exc))
        sys.exit(1)

    draft = {
        "name": name,
        "company": company,
        "email": email,
        "phone": phone,
        "requirement": requirement.replace("\\n", "\n"),
    }

    async def _run():
        await services.store.init_db()
        try:
            return await services.orchestrator.submit(draft)
        finally:
            await services.store.close()

    try:
        result = run_async(_run())
    except (ValidationError, StorageUnavailable) as exc:
        print_error(str(exc))
        sys.exit(1)

    if result.outcome is SubmissionOutcome.FAILURE:
        print_error(f"Inquiry not stored: {result.error}")
        sys.exit(1)
    if result.outcome is SubmissionOutcome.PARTIAL_SUCCESS:
        console.print(f"[yellow]Inquiry {result.inquiry.id} stored, notification failed:[/yellow] {result.error}")
        sys.exit(EXIT_PARTIAL)
    print_success(f"Inquiry {result.inquiry.id} stored and notified")
    print_json({
        "message_id": result.dispatch.message_id,
        "accepted": list(result.dispatch.accepted),
        "rejected": list(result.dispatch.rejected),
    })


@main.command()
@click.argument("inquiry_id")
@click.pass_context
def show(ctx: click.Context, inquiry_id: str) -> None:
    """Print one stored inquiry as JSON."""
    try:
        services = build_services(_settings(ctx))
    except ConfigError as exc:
        print_error(str(exc))
        sys.exit(1)

    async def _run():
        await services.store.init_db()
        try:
            return await services.store.get(inquiry_id)
        finally:
            await services.store.close()

    try:
        inquiry = run_async(_run())
    except StorageUnavailable as exc:
        print_error(str(exc))
        sys.exit(1)
    if inquiry is None:
        print_error(f"Inquiry '{inquiry_id}' not found")
        sys.exit(1)
    print_json(inquiry.model_dump(mode="json"))


if __name__ == "__main__":
    main()
