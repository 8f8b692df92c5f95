"""
Flask CLI commands.

Commands:
- flask init-db: Create all database tables
- flask drop-db: Drop all database tables
"""
import click

from bizhub.database import create_schema, drop_schema


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create all tables that do not exist yet."""
        try:
            create_schema()
        except Exception as e:
            click.echo(click.style(f'Error creating tables: {str(e)}', fg='red'))
            raise SystemExit(1)
        click.echo(click.style('Database tables created.', fg='green'))

    @app.cli.command('drop-db')
    @click.confirmation_option(prompt='This deletes every table and all data. Continue?')
    def drop_db_command():
        """Drop all tables."""
        drop_schema()
        click.echo(click.style('Database tables dropped.', fg='yellow'))
