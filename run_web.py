#!/usr/bin/env python3
"""
Main entry point for the Court Sense web API.

This script launches the Flask-based web server. Host, port, data
directory and log level can be overridden with the COURTSENSE_HOST,
COURTSENSE_PORT, COURTSENSE_DATA_DIR and COURTSENSE_LOG_LEVEL environment
variables.
"""
import os

from courtsense.ui.web_app import run_web_app
from courtsense.utils import configure_logging
from courtsense.utils.constants import DEFAULT_HOST, DEFAULT_PORT

if __name__ == "__main__":
    configure_logging(os.environ.get("COURTSENSE_LOG_LEVEL", "INFO"))
    run_web_app(
        host=os.environ.get("COURTSENSE_HOST", DEFAULT_HOST),
        port=int(os.environ.get("COURTSENSE_PORT", DEFAULT_PORT)),
        data_dir=os.environ.get("COURTSENSE_DATA_DIR"),
    )
