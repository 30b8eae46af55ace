"""Allow `python -m tdlr`."""

from tdlr.cli.main import cli

if __name__ == "__main__":
    cli()
