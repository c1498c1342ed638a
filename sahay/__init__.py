"""Sahay: conversational appointment scheduling assistant."""

__version__ = "0.1.0"
