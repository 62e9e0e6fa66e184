"""
Entry point for module execution (``python -m static_styled``).

This module delegates execution to the CLI handler in ``static_styled.cli.__main__``.
"""

import sys

from static_styled.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
