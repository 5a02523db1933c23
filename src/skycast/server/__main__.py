"""
Entry point for running the weather tool host as a module.

This allows the server to be started with: python -m skycast.server
"""

from skycast.server.app import main

if __name__ == "__main__":
    main()
