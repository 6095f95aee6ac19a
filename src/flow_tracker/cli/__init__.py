"""Command-line interface for Flow."""
