"""lsptree - type and call hierarchy trees built from language-server replies."""

__version__ = "0.1.0"
