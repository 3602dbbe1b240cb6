"""
CLI subcommands for savings accounts.

Usage:
    sacco accounts list
    sacco accounts transactions [ACCOUNT_ID] [--page N] [--limit N]
"""

from typing import Optional

import typer

from sacco_portal.cli._http import money, run

accounts_app = typer.Typer(help="View savings accounts and transactions")


@accounts_app.command("list")
def accounts_list():
    """List savings accounts with balances."""

    async def _list(portal):
        accounts = await portal.member.get_accounts()
        if not accounts:
            typer.echo("No accounts found.")
            return

        typer.echo(f"🏦 Accounts ({len(accounts)}):\n")
        for account in accounts:
            typer.echo(
                f"  {account.account_number} ({account.account_type}) [{account.status}]\n"
                f"     ID: {account.id}\n"
                f"     Balance: {money(account.balance)}\n"
                f"     Available: {money(account.available_balance)}"
                + (f" (lien {money(account.lien_amount)})" if account.lien_amount else "")
                + f"\n     Interest: {account.interest_rate:g}%\n"
            )

    run(_list)


@accounts_app.command("transactions")
def accounts_transactions(
    account_id: Optional[str] = typer.Argument(
        None, help="Account ID (omit for recent transactions across accounts)"
    ),
    page: int = typer.Option(1, "--page", "-p", min=1),
    limit: int = typer.Option(20, "--limit", "-n", min=1, max=100),
):
    """Show transaction history."""

    async def _transactions(portal):
        if account_id:
            result = await portal.member.get_account_transactions(account_id, page, limit)
        else:
            result = await portal.member.get_transactions(page, limit)

        if not result.data:
            typer.echo("No transactions found.")
            return

        for txn in result.data:
            sign = "-" if txn.type in ("WITHDRAWAL", "FEE", "PENALTY", "LOAN_REPAYMENT") else "+"
            label = txn.reference or txn.description or ""
            typer.echo(
                f"  {txn.created_at[:10]}  {txn.type:<18} {sign}{money(txn.amount)}  {label}"
            )
        if result.has_more:
            typer.echo(f"\n  More available: --page {page + 1}")

    run(_transactions)
