"""Deterministic rules kernel for the Summoner's Grid card battle game."""

__version__ = "0.1.0"
