"""
Entry point for running the CLI as a module.

This allows the package to be executed with: python -m browsermcp_resilience
"""

from browsermcp_resilience.cli import main

if __name__ == "__main__":
    main()
