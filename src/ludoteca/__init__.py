"""Ludoteca: a lending tracker for a board game library."""

__version__ = "0.1.0"
