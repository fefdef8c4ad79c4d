"""hive-spoke: spoke declarations and hub-side verification."""

__version__ = "0.2.0"
