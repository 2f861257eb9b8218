"""Allow running as ``python -m omni``."""

from .cli import main

main()
