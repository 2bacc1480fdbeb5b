#!/usr/bin/env python3
"""buildchecker - lock a branch when its builds keep failing."""

from buildchecker.cli import main

if __name__ == "__main__":
    main()
