"""
Management commands, e.g.:

    flask --app api create-user --username root --email root@example.com --password s3cret --role admin

The HTTP /register route only ever creates role "user"; this is how the
first admin gets into the database.
"""
import click
from flask import current_app

from models.user import User
from utils.context import get_storage
from utils.security import hash_password


def register_cli(app):
    @app.cli.command("create-user")
    @click.option("--username", required=True)
    @click.option("--email", required=True)
    @click.option("--password", required=True, prompt=True, hide_input=True, confirmation_prompt=True)
    @click.option("--role", default="user", show_default=True)
    def create_user(username, email, password, role):
        """Create a user directly in the database."""
        allowed = current_app.config.get("ALLOWED_ROLES", ["admin", "user"])
        if role not in allowed:
            raise click.BadParameter(f"role must be one of {', '.join(allowed)}", param_hint="--role")

        username = username.strip()
        storage = get_storage()
        if storage.get_user_by_username(username) is not None:
            raise click.ClickException(f"username {username!r} already exists")
        email = email.strip().lower()
        if storage.get_user_by_email(email) is not None:
            raise click.ClickException(f"email {email!r} already registered")

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            role=role,
        )
        storage.new(user)
        storage.save()
        click.echo(f"Created {role} {username} ({user.id})")
