"""Client core for the tender procurement portal."""

__version__ = "0.1.0"
