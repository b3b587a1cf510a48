"""Consolidated stock recommendations from concurrent analyzers."""

import os


def get_server_version() -> str:
    """Get version with fallback for dev mode."""
    if version := os.environ.get("SERVER_VERSION"):
        return version
    try:
        from importlib.metadata import version as pkg_version

        return pkg_version("stock-consensus")
    except Exception:
        return "dev"


SERVER_VERSION = get_server_version()
# Bump when the report document changes materially
# v1: Initial schema
# v2: Added run_health block and per-analyzer contributions
SCHEMA_VERSION = "2"
