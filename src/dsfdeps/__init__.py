"""Dependency checks and copies for X-Plane DSF scenery tiles."""

__version__ = "0.1.0"
