"""
Command-line interface for mcmonitor.
"""

from .main import main_cli

__all__ = ["main_cli"]
