"""
Entry point for running the chat client as a module.

This allows the package to be executed with: python -m skycast <tool-host>
"""

from skycast.cli import app

if __name__ == "__main__":
    app()
