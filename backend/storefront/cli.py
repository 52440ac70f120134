# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/storefront/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Order status registry:
# - python -m flask statuses list [--category shipping]
#   List registered statuses with milestone flag and next statuses.
# - python -m flask statuses check
#   Re-run registry validation and print its summary.
#
# Payment attempts:
# - python -m flask payments stats [--period week]
#   Attempt counts by bucket.
# - python -m flask payments sweep-stale [--hours 72] [--reviewer system]
#   Reject undecided attempts older than the threshold.
#
# Orders:
# - python -m flask orders audit-history
#   Verify every order's status history is a walk of the status graph.

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models import Order
from .order_status import REGISTRY, StatusCategory, StatusRegistry, get_next_statuses
from .services import order_service, review_service, stats_service
from .time_utils import STATS_PERIODS


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@click.group('statuses')
def statuses_group():
    """Order status registry inspection."""


@statuses_group.command('list')
@click.option('--category', type=click.Choice([c.value for c in StatusCategory]), help='Filter by category')
def list_statuses(category):
    """List registered order statuses."""
    categories = [StatusCategory(category)] if category else list(StatusCategory)
    for cat in categories:
        click.echo(f"\n{cat.value.upper()}")
        for definition in REGISTRY.by_category(cat):
            marker = "*" if definition.is_milestone else " "
            nxt = ", ".join(s.value for s in get_next_statuses(definition.code)) or "(terminal)"
            click.echo(f"  {marker} {definition.code.value:<28} -> {nxt}")


@statuses_group.command('check')
def check_statuses():
    """Rebuild the registry from its sources and print the summary."""
    registry = StatusRegistry.build()
    summary = registry.summary()
    click.echo(
        f"PASS {summary['statuses']} statuses, {summary['transitions']} transitions, "
        f"{summary['milestones']} milestones, {summary['legacy_values']} legacy values"
    )
    click.echo(f"     Terminal: {', '.join(summary['terminal'])}")


@click.group('payments')
def payments_group():
    """Payment attempt reporting and maintenance."""


@payments_group.command('stats')
@click.option('--period', type=click.Choice(STATS_PERIODS), default='all', show_default=True)
@with_appcontext
def payment_stats(period):
    """Attempt counts: total, pending, rejected, approved."""
    stats = stats_service.get_stats(period)
    click.echo(f"Period:   {stats.period}" + (f" (since {stats.since})" if stats.since else ""))
    click.echo(f"Total:    {stats.total}")
    click.echo(f"Pending:  {stats.pending}")
    click.echo(f"Approved: {stats.approved}")
    click.echo(f"Rejected: {stats.rejected}")


@payments_group.command('sweep-stale')
@click.option('--hours', type=int, default=None, help='Age threshold (default: STALE_ATTEMPT_HOURS)')
@click.option('--reviewer', default=None, help='Reviewer id recorded on rejections (default: SYSTEM_REVIEWER_ID)')
@with_appcontext
def sweep_stale(hours, reviewer):
    """Reject undecided attempts older than the threshold."""
    hours = hours if hours is not None else current_app.config["STALE_ATTEMPT_HOURS"]
    reviewer = reviewer or current_app.config["SYSTEM_REVIEWER_ID"]

    if hours <= 0:
        raise click.BadParameter("must be a positive integer", param_hint="--hours")

    result = review_service.sweep_stale_attempts(older_than_hours=hours, reviewer_id=reviewer)
    click.echo(f"PASS Rejected {len(result['rejected'])} stale attempt(s) as '{reviewer}'")
    if result["skipped"]:
        click.echo(f"SKIP {len(result['skipped'])} already decided: {', '.join(map(str, result['skipped']))}")


@click.group('orders')
def orders_group():
    """Order inspection."""


@orders_group.command('audit-history')
@with_appcontext
def audit_history():
    """Check that each order's history is a valid walk ending at its current status."""
    bad = []
    orders = db.session.query(Order).order_by(Order.id).all()
    for order in orders:
        rows = order_service.get_status_history(order.id)
        if not order_service.history_is_valid_walk(rows) or not rows or rows[-1].to_status != order.current_status:
            bad.append(order.id)

    if bad:
        raise click.ClickException(f"{len(bad)} order(s) with invalid history: {', '.join(map(str, bad))}")
    click.echo(f"PASS {len(orders)} order histories are valid walks")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(statuses_group)
    app.cli.add_command(payments_group)
    app.cli.add_command(orders_group)
