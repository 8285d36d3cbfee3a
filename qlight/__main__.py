#!/usr/bin/env python3
"""
Entry point for running qlight as a module.

Usage:
    python -m qlight list
    python -m qlight set --all red:on
"""

import sys

from qlight.cli import main

sys.exit(main())
