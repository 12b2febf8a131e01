#!/usr/bin/env python3
"""Entry point for pipecheck CLI when run as python -m pipecheck.cli."""

if __name__ == "__main__":
    from pipecheck.cli.main import main

    main()
