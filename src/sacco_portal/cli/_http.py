"""
Shared helpers for CLI commands that talk to the SACCO backend.

Every command runs inside ``run()``: it builds the application root, restores
and validates the stored session, enforces the login guard and turns
classified errors into terminal output.
"""

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

import typer
from pydantic import BaseModel, ValidationError

from sacco_portal.api.errors import PortalError
from sacco_portal.app import PortalApp
from sacco_portal.config import CONFIG
from sacco_portal.forms import form_errors
from sacco_portal.loans import format_currency

LOGIN_REQUIRED = "🔒 You are not logged in. Run `sacco login` first."

F = TypeVar("F", bound=BaseModel)


def create_portal() -> PortalApp:
    """Build the application root (patched in tests)."""
    return PortalApp()


def money(amount: Any) -> str:
    return format_currency(amount, CONFIG.currency)


def echo_form_errors(exc: ValidationError) -> None:
    for field, message in form_errors(exc).items():
        label = "" if field == "form" else f"{field}: "
        typer.echo(f"❌ {label}{message}")


def validate_form(form_cls: type[F], **values: Any) -> F:
    """Validate CLI input against a form schema, exiting on failure."""
    try:
        return form_cls(**values)
    except ValidationError as e:
        echo_form_errors(e)
        raise typer.Exit(code=1)


async def _run(
    action: Callable[[PortalApp], Awaitable[Any]], require_auth: bool
) -> Any:
    portal = create_portal()
    try:
        await portal.startup()
        if require_auth and not portal.session.is_authenticated:
            typer.echo(LOGIN_REQUIRED)
            raise typer.Exit(code=1)

        try:
            return await action(portal)
        except PortalError as e:
            if e.silent:
                # Expired or revoked token: drop the session, no error report.
                portal.session.logout()
                typer.echo(LOGIN_REQUIRED)
            else:
                typer.echo(f"❌ {e.message}")
            raise typer.Exit(code=1)
        except ValidationError as e:
            echo_form_errors(e)
            raise typer.Exit(code=1)
    finally:
        await portal.aclose()


def run(action: Callable[[PortalApp], Awaitable[Any]], require_auth: bool = True) -> Any:
    """Run an async command body against a freshly started portal."""
    return asyncio.run(_run(action, require_auth))
