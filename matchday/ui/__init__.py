"""
UI package for the Matchday engine.

This package contains the Flask JSON API served over match sessions.
"""
from .web_app import create_app, run_web_app

__all__ = ["create_app", "run_web_app"]
