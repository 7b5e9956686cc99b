"""
Allow running hdrtmo as a module: python -m hdrtmo
"""

from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
