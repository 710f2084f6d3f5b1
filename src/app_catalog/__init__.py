"""Catalog of installable app templates and configuration validation."""

__version__ = "0.1.0"
