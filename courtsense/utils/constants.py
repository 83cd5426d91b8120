"""
Constants for the Court Sense offense tracker.

This module contains configuration constants used throughout the application.
"""

# Application metadata
APP_TITLE = "Court Sense"

# Storage keys
GAMES_STORAGE_KEY = "court-sense-games"
TEAMS_STORAGE_KEY = "court-sense-teams"
DEFAULT_DATA_DIR = "data"

# Lineup configuration
MAX_PLAYERS_ON_COURT = 5

# Roster numbering: new players start at #4 and count up past the highest number
FIRST_PLAYER_NUMBER = 4
MIN_PLAYER_NUMBER = 0
MAX_PLAYER_NUMBER = 99

# Shot configuration
SHOT_TYPES = (2, 3)
FREE_THROW_SLOTS = 3

# Clock refresh period in seconds (display resolution is centiseconds)
CLOCK_TICK_SECONDS = 0.01

# Attribution bucket for offenses without an assigned player
TEAM_ACTOR = "Team"
UNKNOWN_PLAYER_NAME = "Unknown"

DEFAULT_OPPONENT_NAME = "Opponent"

# Web server defaults
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 7122
