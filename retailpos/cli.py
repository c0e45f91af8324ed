# retailpos/cli.py
import click
from flask.cli import with_appcontext
from werkzeug.security import generate_password_hash

from .extensions import pos
from .model import ROLES
from .services.import_export import export_products, export_sales, read_products

@click.command("create-user")
@with_appcontext
@click.option("--email", required=True)
@click.option("--password", required=True)
@click.option("--name", required=True)
@click.option("--role", type=click.Choice(ROLES), default="admin", show_default=True)
def create_user(email, password, name, role):
    email = email.strip().lower()
    if pos.users.by_email(email):
        click.echo("Email already exists"); return
    u = pos.users.add(email=email, name=name, password_hash=generate_password_hash(password), role=role)
    click.echo(f"User created: {u.id} {u.email} ({u.role})")

@click.command("import-products")
@with_appcontext
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def import_products(path):
    try:
        products = read_products(path, first_id=pos.catalog.next_id())
    except ValueError as e:
        raise click.ClickException(str(e))
    pos.catalog.load(products)
    click.echo(f"{len(products)} products have been imported from {path}")

@click.command("export-products")
@with_appcontext
@click.argument("path", type=click.Path(dir_okay=False))
def export_products_cmd(path):
    n = export_products(pos.catalog.all(), path)
    click.echo(f"{n} products have been exported to {path}")

@click.command("export-sales")
@with_appcontext
@click.argument("path", type=click.Path(dir_okay=False))
def export_sales_cmd(path):
    n = export_sales(pos.history.all(), path)
    click.echo(f"{n} sale lines have been exported to {path}")

def register_cli(app):
    app.cli.add_command(create_user)
    app.cli.add_command(import_products)
    app.cli.add_command(export_products_cmd)
    app.cli.add_command(export_sales_cmd)
