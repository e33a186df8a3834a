#!/usr/bin/env python3
"""Runs the scanner from a checkout; installed copies use the ``webaudit`` script."""

from webaudit.cli import main

if __name__ == "__main__":
    main()
