"""Shared utilities for tmuxdev."""
