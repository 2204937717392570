"""GROW-model coaching session engine."""

__version__ = "0.1.0"
