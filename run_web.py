#!/usr/bin/env python3
"""
Main entry point for the Matchday web API.

This script launches the Flask-based JSON server. Set MATCHDAY_DATA_DIR to
keep matches on disk (with autosave); otherwise they live in memory.
"""
import os

from matchday.ui.web_app import run_web_app
from matchday.utils.constants import DEFAULT_HOST, DEFAULT_PORT
from matchday.utils.log_config import configure_logging

if __name__ == "__main__":
    configure_logging()
    run_web_app(
        host=os.environ.get("MATCHDAY_HOST", DEFAULT_HOST),
        port=int(os.environ.get("MATCHDAY_PORT", DEFAULT_PORT)),
        data_dir=os.environ.get("MATCHDAY_DATA_DIR") or None,
    )
