# Overview: Flask CLI command groups for bootstrap, inspection, and demo data.

# backend/boutique_pos/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent: creates tables and the invoice counter row.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Catalog:
# - python -m flask items list [--search kurta]
# - python -m flask items low-stock
# - python -m flask items seed-demo
#   Insert a handful of demo items (skips names that already exist).
#
# Sales:
# - python -m flask sales list --limit 20
# - python -m flask sales next-invoice --dry-run
#   Show the next invoice number without consuming it.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Item, Sale
from .money import format_cents
from .services import items_service
from .services.document_service import (
    ensure_invoice_counter,
    format_invoice_number,
    next_invoice_number,
    peek_invoice_counter,
)
from .validation import ConflictError

DEMO_ITEMS = [
    {"name": "Cotton Kurta", "category": "Apparel", "purchase_price_cents": 45000,
     "selling_price_cents": 79900, "stock": 12, "unit": "pcs"},
    {"name": "Silk Dupatta", "category": "Accessories", "purchase_price_cents": 30000,
     "selling_price_cents": 54900, "stock": 4, "unit": "pcs"},
    {"name": "Oxidised Earrings", "category": "Jewellery", "purchase_price_cents": 8000,
     "selling_price_cents": 19900, "stock": 25, "unit": "pair"},
    {"name": "Printed Saree", "category": "Apparel", "purchase_price_cents": 120000,
     "selling_price_cents": 189900, "stock": 3, "unit": "pcs"},
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create tables and the invoice counter (safe to re-run)."""
    db.create_all()
    counter = ensure_invoice_counter()
    click.echo(f"Tables ready. Invoice counter at {counter.counter}.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        click.confirm('This deletes ALL data. Continue?', abort=True)
    db.drop_all()
    db.create_all()
    ensure_invoice_counter()
    click.echo("Database reset.")


@click.group('items')
def items_group():
    """Catalog inspection commands."""


@items_group.command('list')
@click.option('--search', default=None, help='Match name, SKU, or barcode')
@with_appcontext
def list_items_cli(search):
    result = items_service.list_items(search)
    if not result["items"]:
        click.echo("No items.")
        return
    for item in result["items"]:
        flag = " LOW" if item["is_low_stock"] else ""
        click.echo(
            f"{item['id']:>5}  {item['barcode']:<14} {item['sku']:<16} "
            f"{item['name'][:30]:<30} {format_cents(item['selling_price_cents']):>10} "
            f"stock={item['stock']}{flag}"
        )


@items_group.command('low-stock')
@with_appcontext
def low_stock_cli():
    items = items_service.list_low_stock()
    if not items:
        click.echo("No low-stock items.")
        return
    for item in items:
        click.echo(f"{item['name']}: {item['stock']} (min {item['min_stock']})")


@items_group.command('seed-demo')
@with_appcontext
def seed_demo_cli():
    created = 0
    for demo in DEMO_ITEMS:
        if db.session.query(Item).filter_by(name=demo["name"]).first():
            continue
        try:
            items_service.create_item(patch=dict(demo))
            created += 1
        except ConflictError as e:
            click.echo(f"Skipped {demo['name']}: {e}")
    click.echo(f"Seeded {created} item(s).")


@click.group('sales')
def sales_group():
    """Invoice inspection commands."""


@sales_group.command('list')
@click.option('--limit', type=int, default=20, show_default=True)
@with_appcontext
def list_sales_cli(limit):
    sales = db.session.query(Sale).order_by(Sale.created_at.desc(), Sale.id.desc()).limit(limit).all()
    if not sales:
        click.echo("No sales.")
        return
    for sale in sales:
        click.echo(
            f"{sale.invoice_number}  {sale.created_at:%Y-%m-%d %H:%M}  "
            f"{sale.payment_method:<6} {format_cents(sale.total_cents):>10}"
        )


@sales_group.command('next-invoice')
@click.option('--dry-run', is_flag=True, help='Show the next number without consuming it')
@with_appcontext
def next_invoice_cli(dry_run):
    if dry_run:
        click.echo(format_invoice_number(peek_invoice_counter() + 1))
        return
    click.echo(next_invoice_number())


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(items_group)
    app.cli.add_command(sales_group)
