"""
SACCO Portal CLI: member portal for the savings-and-credit cooperative.

This package splits CLI commands into focused modules:
- main:          login, logout, whoami, refresh, dashboard, passwords
- public:        register, partner, loan-request, open-link
- accounts:      list, transactions
- loans:         list, show
- requests:      list, deposit, repay, new
- notifications: list, read, read-all
"""

import typer

from sacco_portal.cli.accounts import accounts_app
from sacco_portal.cli.loans import loans_app
from sacco_portal.cli.main import configure_logging, register_commands
from sacco_portal.cli.notifications import notifications_app
from sacco_portal.cli.public import register_public_commands
from sacco_portal.cli.requests import requests_app

app = typer.Typer(help="SACCO member portal")


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging (DEBUG level)"
    ),
):
    """
    SACCO member portal.
    """
    configure_logging(verbose)


register_commands(app)
register_public_commands(app)

app.add_typer(accounts_app, name="accounts")
app.add_typer(loans_app, name="loans")
app.add_typer(requests_app, name="requests")
app.add_typer(notifications_app, name="notifications")

if __name__ == "__main__":
    app()
