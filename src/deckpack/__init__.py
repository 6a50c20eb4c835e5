"""Portable deck packaging with content-addressed assets."""

__version__ = "0.1.0"
