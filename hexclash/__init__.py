"""A networked turn-based strategy game on a hexagonal field: client, server, console and wire format."""

__version__ = "0.7.0"