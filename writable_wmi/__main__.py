"""
Entry point for running the tool as a module.

Usage: python -m writable_wmi <command> [options]
"""

from writable_wmi.cli import app

if __name__ == "__main__":
    app()
