"""hostinit — apply kernel tunables and resolver settings at container start."""

__version__ = "0.1.0"
