"""
Entry point for ``python -m queuewise``.
"""

from .cli.app import app

if __name__ == "__main__":
    app()
