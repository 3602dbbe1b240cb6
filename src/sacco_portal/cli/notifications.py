"""
CLI subcommands for member notifications.

Usage:
    sacco notifications list
    sacco notifications read <id>
    sacco notifications read-all
"""

import typer

from sacco_portal.cli._http import run
from sacco_portal.deeplink import notification_target, unread_count

notifications_app = typer.Typer(help="Read member notifications")


@notifications_app.command("list")
def notifications_list(
    unread_only: bool = typer.Option(False, "--unread", help="Only unread notifications"),
):
    """List notifications, newest first."""

    async def _list(portal):
        notifications = await portal.member.get_notifications()
        typer.echo(f"🔔 {unread_count(notifications)} unread\n")

        shown = [n for n in notifications if not (unread_only and n.is_read)]
        if not shown:
            typer.echo("No notifications.")
            return

        for n in sorted(shown, key=lambda n: n.created_at or "", reverse=True):
            marker = "•" if not n.is_read else " "
            typer.echo(f" {marker} [{n.id}] {n.title}")
            typer.echo(f"     {n.message}")
            target = notification_target(n)
            if target:
                typer.echo(f"     → {target}")

    run(_list)


@notifications_app.command("read")
def notifications_read(
    notification_id: str = typer.Argument(help="Notification ID"),
):
    """Mark one notification as read."""

    async def _read(portal):
        await portal.member.mark_notification_read(notification_id)
        typer.echo(f"✅ Marked {notification_id} as read.")

    run(_read)


@notifications_app.command("read-all")
def notifications_read_all():
    """Mark every unread notification as read."""

    async def _read_all(portal):
        notifications = await portal.member.get_notifications()
        unread = [n for n in notifications if not n.is_read]
        for n in unread:
            await portal.member.mark_notification_read(n.id)
        typer.echo(f"✅ Marked {len(unread)} notifications as read.")

    run(_read_all)
