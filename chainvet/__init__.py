"""Validation checks for OP Stack chain configurations against standard settings."""

__version__ = "0.1.0"