"""Mazetool: generate, analyze and solve grid mazes."""

__version__ = "1.0.0"
