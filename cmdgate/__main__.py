"""Entry point for running cmdgate as a module: python -m cmdgate."""

from cmdgate.cli.commands import app

if __name__ == "__main__":
    app()
