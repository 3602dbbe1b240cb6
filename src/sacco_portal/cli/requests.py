"""
CLI subcommands for deposit, repayment and other member requests.

Usage:
    sacco requests list
    sacco requests deposit --account ID --amount N --description TEXT [--receipt FILE]
    sacco requests repay --loan ID --amount N --method M --receipt-no NO --receipt FILE
    sacco requests new --type PROFILE_UPDATE --description TEXT
"""

from pathlib import Path
from typing import Optional

import typer

from sacco_portal.cli._http import money, run, validate_form
from sacco_portal.forms import DepositRequestForm, LoanRepaymentRequestForm, RequestForm

requests_app = typer.Typer(help="Submit and track member requests")

STATUS_ICONS = {"PENDING": "🟡", "APPROVED": "🟢", "REJECTED": "🔴"}


def _echo_request(req) -> None:
    icon = STATUS_ICONS.get(req.status, "⚪")
    amount = f" {money(req.amount)}" if req.amount is not None else ""
    typer.echo(f"  {icon} {req.request_id or req.id} {req.type or ''}{amount} [{req.status}]")
    if req.description:
        typer.echo(f"     {req.description}")
    if req.staff_notes:
        typer.echo(f"     Staff notes: {req.staff_notes}")


@requests_app.command("list")
def requests_list():
    """List deposit and loan repayment requests."""

    async def _list(portal):
        deposits = await portal.member.get_deposit_requests()
        repayments = await portal.member.get_loan_repayment_requests()

        typer.echo(f"📥 Deposit requests ({len(deposits)}):")
        for req in deposits:
            _echo_request(req)
        typer.echo(f"\n📤 Loan repayment requests ({len(repayments)}):")
        for req in repayments:
            _echo_request(req)

    run(_list)


@requests_app.command("deposit")
def requests_deposit(
    account: str = typer.Option(..., "--account", help="Account ID to deposit into"),
    amount: float = typer.Option(..., "--amount"),
    description: str = typer.Option(..., "--description", "-d"),
    reference: Optional[str] = typer.Option(None, "--reference", help="Bank reference number"),
    receipt: Optional[Path] = typer.Option(None, "--receipt", help="Receipt image or PDF"),
):
    """Submit a deposit request for staff approval."""
    form = validate_form(
        DepositRequestForm,
        account_id=account,
        amount=amount,
        reference_number=reference,
        description=description,
        receipt=receipt,
    )

    async def _deposit(portal):
        req = await portal.member.create_deposit_request(form.to_payload(), form.receipt)
        typer.echo("✅ Deposit request submitted. Waiting for approval.")
        _echo_request(req)

    run(_deposit)


@requests_app.command("repay")
def requests_repay(
    loan: str = typer.Option(..., "--loan", help="Loan ID"),
    amount: float = typer.Option(..., "--amount"),
    method: str = typer.Option(..., "--method", help="Payment method (e.g. BANK_TRANSFER)"),
    receipt_no: str = typer.Option(..., "--receipt-no", help="Bank receipt number"),
    receipt: Path = typer.Option(..., "--receipt", help="Bank receipt image or PDF"),
    notes: Optional[str] = typer.Option(None, "--notes"),
):
    """Submit a loan repayment request for staff approval."""
    form = validate_form(
        LoanRepaymentRequestForm,
        loan_id=loan,
        amount=amount,
        payment_method=method,
        bank_receipt_no=receipt_no,
        notes=notes,
        bank_receipt=receipt,
    )

    async def _repay(portal):
        req = await portal.member.create_loan_repayment_request(
            form.to_payload(), form.bank_receipt
        )
        typer.echo("✅ Loan repayment request submitted. Waiting for approval.")
        _echo_request(req)

    run(_repay)


@requests_app.command("new")
def requests_new(
    type_: str = typer.Option(..., "--type", help="Request type (e.g. PROFILE_UPDATE)"),
    description: str = typer.Option(..., "--description", "-d"),
    amount: Optional[float] = typer.Option(None, "--amount"),
):
    """Submit any other request type."""
    form = validate_form(RequestForm, type=type_.upper(), amount=amount, description=description)

    async def _new(portal):
        req = await portal.member.create_request(form.to_payload())
        typer.echo("✅ Request submitted.")
        _echo_request(req)

    run(_new)
