"""
Main entry point for the web_fuzzer package.

Allows running the fuzzer as: python -m web_fuzzer
"""

import sys

from web_fuzzer.cli import main

if __name__ == "__main__":
    sys.exit(main())
