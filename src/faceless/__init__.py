"""Faceless narrated video production engine."""

__version__ = "0.2.0"
