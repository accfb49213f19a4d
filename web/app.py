#!/usr/bin/env python3
"""
FedSpace Scoring API launcher.

Usage:
    python -m web.app

Host and port come from config.yaml (``web``) or WEB_HOST / WEB_PORT.
"""

from web.backend.app import main

if __name__ == "__main__":
    main()
