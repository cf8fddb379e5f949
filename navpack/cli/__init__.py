"""Command-line interface for NavKit."""
