import click
from flask import current_app
from flask.cli import with_appcontext
from werkzeug.security import generate_password_hash

from .errors import StorageError
from .model import new_id


def _store():
    return current_app.extensions["subtasker"]["store"]


@click.command("init-store")
@with_appcontext
def init_store_command():
    """Create an empty users file if there is none."""
    store = _store()
    if store.initialize():
        click.echo(f"Created {store.path}")
    else:
        click.echo(f"{store.path} already exists")


@click.command("add-user")
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--name", default=None)
@click.option("--plaintext", is_flag=True, help="Store the password unhashed.")
@with_appcontext
def add_user_command(email, password, name, plaintext):
    """Seed a user record; there is no registration endpoint."""
    email = email.strip()
    if not email or not password:
        raise click.UsageError("Email and password are required")
    user = {
        "id": new_id(),
        "email": email,
        "password": password if plaintext else generate_password_hash(password),
        "tasks": [],
    }
    if name:
        user["name"] = name
    try:
        _store().add_user(user)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    except StorageError as exc:
        raise click.ClickException(exc.message) from exc
    click.echo(f"Added user {email} ({user['id']})")


def init_app(app):
    app.cli.add_command(init_store_command)
    app.cli.add_command(add_user_command)
