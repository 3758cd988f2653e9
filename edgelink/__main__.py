"""
Entry point for running edgelink as a module: python -m edgelink
"""

from edgelink.cli.commands import app

if __name__ == "__main__":
    app()
