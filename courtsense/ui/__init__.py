"""
UI package for the Court Sense offense tracker.

This package contains the Flask JSON API used by sideline clients.
"""
from .web_app import create_app, run_web_app

__all__ = ["create_app", "run_web_app"]
