"""One module per hive-spoke subcommand, each exposing ``run``."""
