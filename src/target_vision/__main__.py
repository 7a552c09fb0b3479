"""
Entry point for running the target vision system as a module.

Usage:
    python -m target_vision [minutes]
"""

from .cli import main

if __name__ == "__main__":
    main()
