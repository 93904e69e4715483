"""Command-line interface for tmuxdev."""
