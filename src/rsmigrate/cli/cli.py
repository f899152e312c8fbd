"""CLI application for Redshift cluster migration."""

from rsmigrate.cli.commands.migrate import app

if __name__ == "__main__":
    app()
