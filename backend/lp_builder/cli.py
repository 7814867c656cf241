import click

from lp_builder.application.admin.upgrade_free_users import upgrade_free_users


def register_commands(app):
    @app.cli.command("upgrade-free-users")
    def upgrade_free_users_command():
        """Move every free-plan user to the pro plan."""
        upgraded = upgrade_free_users()
        click.echo(f"Upgraded {len(upgraded)} user(s) to pro")
