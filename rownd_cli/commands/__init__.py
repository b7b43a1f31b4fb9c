"""Command handlers.

Each handler takes the ``CommandContext`` first, raises ``RowndCliError``
subclasses on failure and returns an exit code.
"""
