"""Pytest bootstrap configuration.

Pin environment variables before test collection and the module imports
that read application settings.
"""
import os

os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
