"""
Entry point for running the CLI as a module.

Usage:
    python -m vocabstudy.cli list 1
    python -m vocabstudy.cli --help
"""
from .main import main

if __name__ == "__main__":
    main()
