"""Content-addressed image hosting service."""

__version__ = "0.1.0"
