"""Resolve tracker tasks one at a time with external CLI code agents."""

__version__ = "0.1.0"
