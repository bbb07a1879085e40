"""
Execview Module Entry Point
============================

Allows running the CLI via: python -m execview
"""

from execview.cli import main

if __name__ == "__main__":
    main()
