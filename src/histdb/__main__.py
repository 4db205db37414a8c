"""Allow ``python -m histdb``."""

from histdb.cli import cli

if __name__ == "__main__":
    cli()
