"""
CLI subcommands for loans.

Usage:
    sacco loans list
    sacco loans show <loan_id>
"""

import typer

from sacco_portal.cli._http import money, run
from sacco_portal.loans import (
    is_overdue,
    outstanding_balance,
    render_schedule,
    repayment_progress,
    summarize_schedule,
)

loans_app = typer.Typer(help="Track loans and repayment schedules")


@loans_app.command("list")
def loans_list():
    """List loans with outstanding balances."""

    async def _list(portal):
        loans = await portal.member.get_loans()
        if not loans:
            typer.echo("No loans found.")
            return

        typer.echo(f"💰 Loans ({len(loans)}):\n")
        for loan in loans:
            icon = "🔴" if is_overdue(loan) else "🟢"
            typer.echo(
                f"  {icon} {loan.product_name} ({loan.loan_id or loan.id}) [{loan.status}]\n"
                f"     Outstanding: {money(outstanding_balance(loan))}\n"
                f"     Progress: {repayment_progress(loan):.0f}%"
            )
            if loan.next_payment_date:
                typer.echo(
                    f"     Next payment: {money(loan.monthly_installment)} "
                    f"due {loan.next_payment_date}"
                )
            typer.echo("")

    run(_list)


@loans_app.command("show")
def loans_show(
    loan_id: str = typer.Argument(help="Loan ID"),
):
    """Show loan details and the repayment schedule."""

    async def _show(portal):
        loan = await portal.member.get_loan_detail(loan_id)

        typer.echo(f"💰 {loan.product_name} ({loan.loan_id or loan.id})")
        typer.echo(f"   Status: {loan.status}")
        if is_overdue(loan):
            typer.secho(f"   Overdue by {loan.days_overdue} days", fg=typer.colors.RED)
        typer.echo(f"   Outstanding: {money(outstanding_balance(loan))}")
        typer.echo(f"   Installment: {money(loan.monthly_installment)}")
        typer.echo(f"   Paid: {money(loan.total_paid)} ({repayment_progress(loan):.1f}%)")
        typer.echo(f"   Interest: {money(loan.total_interest)} at {loan.interest_rate:g}%"
                   + (f" {loan.interest_type.lower()}" if loan.interest_type else ""))
        if loan.total_penalty:
            typer.echo(f"   Penalty: {money(loan.total_penalty)}")
        if loan.purpose:
            typer.echo(f"   Purpose: {loan.purpose}")

        if not loan.schedule:
            typer.echo("\n   No repayment schedule available.")
            return

        summary = summarize_schedule(loan.schedule)
        typer.echo(
            f"\n   Schedule: {summary.paid_periods}/{summary.periods} installments paid"
        )
        if summary.next_installment:
            item = summary.next_installment
            typer.echo(f"   Next: {money(item.total_payment)} due {item.due_date}")
        typer.echo("")
        for line in render_schedule(loan.schedule):
            typer.echo(f"   {line}")

    run(_show)
