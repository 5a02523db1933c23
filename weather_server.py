"""Launcher for the weather tool host: ``skycast-chat weather_server.py``."""

from skycast.server.app import main

if __name__ == "__main__":
    main()
