"""
Tagsmith CLI Entry Point
========================

Allows running tagsmith as a module: python -m tagsmith
"""

import sys

from tagsmith.cli.main import cli

if __name__ == "__main__":
    sys.exit(cli())
