#!/usr/bin/env python3
"""
North Star - command line entry point.

Run with:
    python -m northstar position --lat 34.05 --lon -118.24
"""

from .cli import main

if __name__ == "__main__":
    main()
