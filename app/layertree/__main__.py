"""Allow running layertree as ``python -m layertree``."""

from layertree.cli.main import app

app()
