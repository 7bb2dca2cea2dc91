#!/usr/bin/env python3
"""vnc-discover CLI - Thin wrapper for cli_main"""

from .cli_main import app, main

__all__ = ["app", "main"]

if __name__ == "__main__":
    main()
