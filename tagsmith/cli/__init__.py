"""
Tagsmith CLI Package
====================

Command-line interface for tagsmith.
"""

from tagsmith.cli.main import cli, main

__all__ = ["cli", "main"]
