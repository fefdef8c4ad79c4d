"""Command-line interface for hive-spoke."""
