"""Entry point for ``python -m servesync``."""

from servesync.cli.typer_app import app

if __name__ == "__main__":
    app()
