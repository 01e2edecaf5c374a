"""Salary and working-time submission service."""

__version__ = "0.1.0"
