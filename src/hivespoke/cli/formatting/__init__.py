"""Console and JSON presentation for the CLI."""

from hivespoke.cli.formatting.output import Reporter

__all__ = ["Reporter"]
