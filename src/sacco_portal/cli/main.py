"""
Top-level CLI commands: login, logout, whoami, refresh, dashboard,
change-password, reset-password.
"""

import os

import typer
from pydantic import ValidationError

from sacco_portal.api.errors import PortalError
from sacco_portal.cli._http import money, run, validate_form
from sacco_portal.forms import ChangePasswordForm, LoginForm, PasswordResetForm


def configure_logging(verbose: bool = False):
    """Configure logging for the CLI."""
    from sacco_portal.logger import setup_logging

    log_level = "DEBUG" if verbose else "WARNING"
    setup_logging(level=log_level)

    if not verbose:
        os.environ["LOGURU_LEVEL"] = "WARNING"


async def submit_pending_loan_request(portal) -> None:
    """Send a loan request that was saved while logged out."""
    pending = portal.pending_loan_request.load()
    if not pending:
        return
    from sacco_portal.forms import LoanRequestForm

    try:
        form = LoanRequestForm(**pending)
    except ValidationError:
        portal.pending_loan_request.clear()
        typer.echo("⚠️  Your saved loan request was incomplete and has been discarded.")
        return

    try:
        await portal.public.create_loan_request(form.to_payload())
    except PortalError as e:
        typer.echo(f"⚠️  Your saved loan request could not be sent: {e.message}")
        typer.echo("   It will be retried the next time you log in.")
        return
    portal.pending_loan_request.clear()
    typer.echo("✅ Your saved loan request has been submitted.")


def register_commands(app: typer.Typer) -> None:
    """Register top-level commands on the main Typer app."""

    @app.command()
    def login(
        phone: str = typer.Option(..., "--phone", prompt=True, help="Registered phone number"),
        password: str = typer.Option(
            ..., "--password", prompt=True, hide_input=True, help="Account password"
        ),
        remember: bool = typer.Option(
            True, "--remember/--no-remember", help="Keep me logged in after this terminal closes"
        ),
    ):
        """Log in to the member portal."""
        form = validate_form(LoginForm, phone=phone, password=password, remember=remember)

        async def _login(portal):
            await portal.session.login(form.phone, form.password, remember_me=form.remember)
            member = portal.session.member
            typer.echo(f"✅ Welcome back, {member.full_name or member.member_id}!")
            await submit_pending_loan_request(portal)

        run(_login, require_auth=False)

    @app.command()
    def logout():
        """Log out and forget stored credentials."""

        async def _logout(portal):
            portal.session.logout()
            typer.echo("👋 Logged out.")

        run(_logout, require_auth=False)

    @app.command()
    def whoami():
        """Show the logged-in member."""

        async def _whoami(portal):
            member = portal.session.member
            typer.echo(f"👤 {member.full_name or '(no name)'}")
            typer.echo(f"   Member ID: {member.member_id or member.id}")
            if member.phone:
                typer.echo(f"   Phone: {member.phone}")
            if member.email:
                typer.echo(f"   Email: {member.email}")
            if member.status:
                typer.echo(f"   Status: {member.status}")
            storage = "remembered" if portal.session.current.remember_me else "this terminal only"
            typer.echo(f"   Session: {storage}")

        run(_whoami)

    @app.command()
    def refresh():
        """Exchange the refresh token for a new access token."""

        async def _refresh(portal):
            await portal.session.refresh_auth()
            typer.echo("🔄 Session refreshed.")

        run(_refresh)

    @app.command()
    def dashboard():
        """Show the savings and loan summary."""

        async def _dashboard(portal):
            kpi = await portal.member.get_kpi_summary()
            typer.echo("📊 Dashboard")
            typer.echo(
                f"   Total savings: {money(kpi.total_savings)} "
                f"({kpi.savings_change_percent:+.1f}%)"
            )
            typer.echo(f"   Accounts: {kpi.total_accounts}")
            typer.echo(f"   Loan outstanding: {money(kpi.loan_outstanding)}")
            typer.echo(f"   Active loans: {kpi.active_loans}")
            if kpi.next_payment_date:
                typer.echo(
                    f"   Next payment: {money(kpi.next_payment_amount)} "
                    f"due {kpi.next_payment_date}"
                )

        run(_dashboard)

    @app.command("change-password")
    def change_password(
        current: str = typer.Option(..., prompt="Current password", hide_input=True),
        new: str = typer.Option(..., prompt="New password", hide_input=True),
        confirm: str = typer.Option(..., prompt="Confirm new password", hide_input=True),
    ):
        """Change the account password."""
        form = validate_form(
            ChangePasswordForm,
            current_password=current,
            new_password=new,
            confirm_password=confirm,
        )

        async def _change(portal):
            await portal.auth.change_password(form.current_password, form.new_password)
            typer.echo("✅ Password changed.")

        run(_change)

    @app.command("reset-password")
    def reset_password(
        email: str = typer.Option(..., prompt=True, help="Email address on file"),
    ):
        """Request a one-time code to reset a forgotten password."""
        form = validate_form(PasswordResetForm, email=email)

        async def _reset(portal):
            request_id = await portal.auth.request_otp(form.email)
            typer.echo(f"📧 A reset code has been sent to {form.email}.")
            if request_id:
                typer.echo(f"   Request ID: {request_id}")

        run(_reset, require_auth=False)
