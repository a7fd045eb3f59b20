"""
Entry point for `python -m periphery_runner`.
"""
import sys

from periphery_runner.cli import main

if __name__ == '__main__':
    sys.exit(main())
