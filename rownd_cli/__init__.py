"""Command-line client for managing Rownd accounts, applications and config."""

__version__ = "1.0.0"
