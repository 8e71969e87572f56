"""A terminal habit tracker: JSON storage, commands and contribution-style grids."""

__version__ = "0.1.0"