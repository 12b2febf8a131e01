"""Command-line interface for pipecheck."""
