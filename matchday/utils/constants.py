"""
Constants for the Matchday engine.

This module contains configuration defaults used throughout the package.
"""

# Application metadata
APP_TITLE = "Matchday"

# Clock defaults
DEFAULT_PLANNED_DURATION_MIN = 90

# Match setup options
MATCH_FORMATS = ("5v5", "7v7", "9v9", "11v11")
DEFAULT_MATCH_FORMAT = "11v11"
PLAYERS_ON_PITCH = {
    "5v5": 5,
    "7v7": 7,
    "9v9": 9,
    "11v11": 11,
}
MATCH_LOCATIONS = ("home", "away")

# Persistence / heartbeat
AUTOSAVE_INTERVAL_SECONDS = 5.0

# Web server
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 7122
