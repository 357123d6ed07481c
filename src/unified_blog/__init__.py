"""Unified Blog: one view over remote catalog posts and locally authored posts."""

__version__ = "0.1.0"
