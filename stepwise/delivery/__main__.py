"""
Entry point for running Stepwise as a module.

Usage:
    python -m stepwise.delivery practice mathtables
    python -m stepwise.delivery stats
    python -m stepwise.delivery --help
"""
from .cli import main

if __name__ == "__main__":
    main()
