"""Entry point for ``python -m pipecheck``."""

from pipecheck.cli.main import main

if __name__ == "__main__":
    main()
