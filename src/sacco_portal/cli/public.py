"""
Public forms that do not need a member login: self-registration,
partnership/sponsorship requests and loan requests, plus deep-link lookup.
"""

import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from sacco_portal.api.errors import UnauthorizedError
from sacco_portal.api.public import resolve_upload_url
from sacco_portal.cli._http import echo_form_errors, run, validate_form
from sacco_portal.deeplink import get_target_view, parse_deep_link
from sacco_portal.forms import (
    LoanRequestForm,
    PartnerRequestForm,
    RegistrationForm,
    generate_password,
)


def register_public_commands(app: typer.Typer) -> None:
    """Register public-form commands on the main Typer app."""

    @app.command()
    def register(
        form_file: Path = typer.Option(
            ..., "--file", "-f", exists=True, dir_okay=False, help="JSON file with registration fields"
        ),
        id_front: Optional[Path] = typer.Option(None, "--id-front", exists=True, dir_okay=False),
        id_back: Optional[Path] = typer.Option(None, "--id-back", exists=True, dir_okay=False),
        new_password: bool = typer.Option(
            False, "--generate-password", help="Generate a password instead of reading one"
        ),
    ):
        """Submit a membership registration request."""
        try:
            fields = json.loads(form_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            typer.echo(f"❌ {form_file} is not valid JSON: {e}")
            raise typer.Exit(code=1)

        generated = None
        if new_password:
            generated = generate_password()
            fields["password"] = generated

        # Validate before uploading anything.
        validate_form(RegistrationForm, **fields)

        async def _register(portal):
            if id_front:
                fields["id_card_front_url"] = await portal.public.upload(id_front, "ID_CARD_FRONT")
            if id_back:
                fields["id_card_back_url"] = await portal.public.upload(id_back, "ID_CARD_BACK")
            form = RegistrationForm(**fields)
            await portal.public.create_registration_request(form.to_payload())

            typer.echo("✅ Registration request submitted. You will be notified once it's approved.")
            for url in (form.id_card_front_url, form.id_card_back_url):
                if url:
                    typer.echo(f"   Uploaded: {resolve_upload_url(url, portal.config.public_base_url)}")
            if generated:
                typer.echo(f"   Your password: {generated}")

        run(_register, require_auth=False)

    @app.command()
    def partner(
        name: str = typer.Option(..., "--name", prompt=True),
        phone: str = typer.Option(..., "--phone", prompt=True),
        company: Optional[str] = typer.Option(None, "--company"),
        request_type: str = typer.Option("PARTNERSHIP", "--type", help="PARTNERSHIP or SPONSORSHIP"),
        sponsorship: Optional[str] = typer.Option(
            None, "--sponsorship", help="PLATINUM, GOLD or SILVER (sponsorships only)"
        ),
    ):
        """Submit a corporate partnership or sponsorship request."""
        form = validate_form(
            PartnerRequestForm,
            name=name,
            phone=phone,
            company_name=company,
            request_type=request_type.upper(),
            sponsorship_type=sponsorship.upper() if sponsorship else None,
        )

        async def _partner(portal):
            await portal.public.create_partner_request(form.to_payload())
            typer.echo(
                "✅ Corporate request submitted. A staff member will review it and contact you soon."
            )

        run(_partner, require_auth=False)

    @app.command("loan-request")
    def loan_request(
        purpose: str = typer.Option(..., "--purpose", help="Loan purpose, or OTHER"),
        amount: str = typer.Option(..., "--amount", help="Requested amount"),
        other: Optional[str] = typer.Option(None, "--other", help="Purpose details when OTHER"),
        phone: Optional[str] = typer.Option(None, "--phone", help="Defaults to your profile phone"),
    ):
        """Request a loan. Saved and sent after login when logged out."""

        async def _loan_request(portal):
            member = portal.session.member
            contact = phone or (member.phone if member else None) or ""
            try:
                form = LoanRequestForm(
                    loan_purpose=purpose.upper(),
                    other_purpose=other,
                    requested_amount=amount,
                    phone=contact,
                )
            except ValidationError as e:
                echo_form_errors(e)
                raise typer.Exit(code=1)

            if not portal.session.is_authenticated:
                portal.pending_loan_request.save(form.model_dump())
                typer.echo("🔒 Login required. Your loan request was saved and will be")
                typer.echo("   submitted after you run `sacco login`.")
                return

            try:
                await portal.public.create_loan_request(form.to_payload())
            except UnauthorizedError:
                # Session expired; keep the request for the next login.
                portal.pending_loan_request.save(form.model_dump())
                typer.echo("💾 Your loan request was saved and will be submitted after login.")
                raise
            typer.echo("✅ Loan request submitted. A staff member will contact you soon.")

        run(_loan_request, require_auth=False)

    @app.command("open-link")
    def open_link(
        link: str = typer.Argument(help="Deep link URL or query string"),
    ):
        """Show which portal view a bot deep link opens."""
        params = parse_deep_link(link)
        typer.echo(get_target_view(params))
