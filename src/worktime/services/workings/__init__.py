"""
Workings Submission Service

Accepts salary/working-time submissions and stores them in the database.
"""

from .main import app

__all__ = ['app']
