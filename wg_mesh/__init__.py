"""WireGuard full-mesh configuration generator."""

__version__ = "0.1.0"
